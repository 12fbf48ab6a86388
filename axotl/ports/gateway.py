from contextlib import AbstractContextManager
from typing import Any, Protocol


class GatewayPort(Protocol):
    """Transactional relational store: parameterized queries plus explicit transactions."""

    def query(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        """Run a SELECT and return rows as dicts."""
        ...

    def query_one(self, sql: str, params: tuple[Any, ...] = ()) -> dict[str, Any] | None: ...

    def execute(self, sql: str, params: tuple[Any, ...] = ()) -> tuple[int, int | None]:
        """Run a write. Returns (affected_rows, last_row_id)."""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """Commit on normal exit, roll back on exception. Re-entrant."""
        ...
