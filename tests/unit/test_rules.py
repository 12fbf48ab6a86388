"""
Rules file loading and validation.
"""

from pathlib import Path

import pytest
import yaml

from axotl.rules.loader import load_rules


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent.parent


@pytest.fixture
def raw_rules(project_root) -> dict:
    with open(project_root / "rules.yaml") as f:
        return yaml.safe_load(f)


def _write(tmp_path, data) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


def test_project_rules_load(project_root):
    rules = load_rules(project_root / "rules.yaml")
    assert rules.roles.default == "registrado"
    assert rules.uploads.max_upload_bytes == 5 * 1024 * 1024
    assert rules.images.profile.fit == "cover"
    assert rules.render.page_width == 612
    assert rules.auth.default_title == "Alguien interesante"
    assert "moderador" in rules.roles.capabilities["publications:review"]


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("auth: [unclosed")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


def test_missing_section(tmp_path, raw_rules):
    del raw_rules["render"]
    with pytest.raises(ValueError, match="validation failed"):
        load_rules(_write(tmp_path, raw_rules))


def test_jpeg_quality_bounds(tmp_path, raw_rules):
    raw_rules["images"]["jpeg_quality"] = 120
    with pytest.raises(ValueError):
        load_rules(_write(tmp_path, raw_rules))
