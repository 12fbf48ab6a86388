#!/usr/bin/env python3
"""
Axotl Press quality gates.

Runs lint, type and test gates and writes a JSON report to artifacts/.
Exit code is 0 only when every selected gate passes.
"""

import argparse
import datetime
import json
import subprocess
import sys
from pathlib import Path
from typing import TypedDict

# --- Types ---


class GateResult(TypedDict):
    status: str  # "pass" | "fail"
    exit_code: int
    stdout: str
    stderr: str
    command: list[str]


class GatesReport(TypedDict):
    timestamp_utc: str
    overall_status: str  # "pass" | "fail"
    gates: dict[str, GateResult]


# --- Config ---

ARTIFACTS_DIR = Path("artifacts")

COMMANDS: dict[str, list[str]] = {
    "rules": ["python3", "-m", "pytest", "-q", "tests/unit/test_rules.py"],
    "lint": ["python3", "-m", "ruff", "check", "axotl", "tests", "scripts"],
    "types": ["python3", "-m", "mypy", "axotl"],
    "tests": [
        "python3",
        "-m",
        "pytest",
        "-q",
        "--disable-warnings",
        "--json-report",
        f"--json-report-file={ARTIFACTS_DIR / 'pytest-report.json'}",
    ],
}

# --- Execution ---


def run_command(name: str, cmd: list[str]) -> GateResult:
    print(f"[{name}] Running: {' '.join(cmd)} ...", end="", flush=True)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as e:
        print(" ERROR")
        return {"status": "fail", "exit_code": -1, "stdout": "", "stderr": str(e), "command": cmd}

    status = "pass" if result.returncode == 0 else "fail"
    print(f" {status.upper()}")
    return {
        "status": status,
        "exit_code": result.returncode,
        "stdout": result.stdout,
        "stderr": result.stderr,
        "command": cmd,
    }


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run Axotl Press quality gates")
    parser.add_argument(
        "--only",
        choices=sorted(COMMANDS),
        action="append",
        help="Run just this gate (repeatable)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    selected = args.only or list(COMMANDS)
    ARTIFACTS_DIR.mkdir(exist_ok=True)
    print("=== Axotl Press: Quality Gates ===")

    results = {name: run_command(name, COMMANDS[name]) for name in selected}
    overall_pass = all(r["status"] == "pass" for r in results.values())

    report: GatesReport = {
        "timestamp_utc": datetime.datetime.now(datetime.UTC).isoformat(),
        "overall_status": "pass" if overall_pass else "fail",
        "gates": results,
    }
    report_path = ARTIFACTS_DIR / "quality_gates_run.json"
    try:
        with open(report_path, "w") as f:
            json.dump(report, f, indent=2)
    except OSError as e:
        print(f"\nFAILED to write report artifact: {e}")
        return 2
    print(f"\nReport written to: {report_path}")

    if overall_pass:
        print("\nSUCCESS: All quality gates passed.")
        return 0

    print("\nFAILURE: One or more quality gates failed.")
    for name, res in results.items():
        if res["status"] == "fail":
            print(f"\n--- {name} FAILED (exit code {res['exit_code']}) ---")
            if res["stdout"].strip():
                print("STDOUT:")
                print(res["stdout"])
            if res["stderr"].strip():
                print("STDERR:")
                print(res["stderr"])
    return 1


if __name__ == "__main__":
    sys.exit(main())
