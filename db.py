from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from uuid import uuid4

from sqlmodel import Field, Session, SQLModel, create_engine, select

import config

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def _run_sort_key(run: dict[str, Any]) -> tuple[Any, Any]:
    return (run.get("elapsed_seconds", float("inf")), run.get("moves", float("inf")))


@dataclass
class RunRecord:
    id: str
    size: int
    elapsed_seconds: int
    moves: int
    created_at: str


class JsonRunRepository:
    """Completed-run log stored as a single JSON document."""

    def __init__(self, path: str | Path, schema_version: int = 1):
        self.path = Path(path)
        self.schema_version = schema_version
        self._ensure_store()

    def _empty_doc(self) -> dict[str, Any]:
        return {"schema_version": self.schema_version, "runs": {}}

    def _ensure_store(self) -> None:
        if self.path.exists():
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._write_doc(self._empty_doc())

    def _read_doc(self) -> dict[str, Any]:
        if not self.path.exists():
            return self._empty_doc()
        raw = self.path.read_text(encoding="utf-8").strip()
        if not raw:
            return self._empty_doc()
        doc = json.loads(raw)
        doc.setdefault("schema_version", self.schema_version)
        doc.setdefault("runs", {})
        return doc

    def _write_doc(self, doc: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(doc, indent=2, sort_keys=True), encoding="utf-8")
        tmp_path.replace(self.path)

    def record_run(self, size: int, elapsed_seconds: int, moves: int) -> dict[str, Any]:
        doc = self._read_doc()
        record = asdict(
            RunRecord(
                id=str(uuid4()),
                size=size,
                elapsed_seconds=elapsed_seconds,
                moves=moves,
                created_at=_utc_now_iso(),
            )
        )
        doc["runs"][record["id"]] = record
        doc["schema_version"] = self.schema_version
        self._write_doc(doc)
        logger.info("Recorded run %s (%dx%d, %ss, %d moves)", record["id"], size, size, elapsed_seconds, moves)
        return record

    def top_runs(self, size: int | None = None, limit: int = 10) -> list[dict[str, Any]]:
        items = list(self._read_doc()["runs"].values())
        if size is not None:
            items = [r for r in items if r.get("size") == size]
        items.sort(key=_run_sort_key)
        return items[:max(0, limit)]

    def close(self) -> None:
        pass


# ---------------------------------------------------------------------------
# SQLModel table for SqliteRunRepository
# ---------------------------------------------------------------------------


class RunModel(SQLModel, table=True):
    __tablename__ = "runs"
    id: str = Field(primary_key=True)
    size: int = Field(index=True)
    elapsed_seconds: int
    moves: int
    created_at: str


class SqliteRunRepository:
    """SQLite-backed run log using SQLModel. Same interface as JsonRunRepository."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.engine = create_engine(f"sqlite:///{self.path}", connect_args={"check_same_thread": False})
        SQLModel.metadata.create_all(self.engine)

    @staticmethod
    def _to_dict(row: RunModel) -> dict[str, Any]:
        return {
            "id": row.id,
            "size": row.size,
            "elapsed_seconds": row.elapsed_seconds,
            "moves": row.moves,
            "created_at": row.created_at,
        }

    def record_run(self, size: int, elapsed_seconds: int, moves: int) -> dict[str, Any]:
        row = RunModel(
            id=str(uuid4()),
            size=size,
            elapsed_seconds=elapsed_seconds,
            moves=moves,
            created_at=_utc_now_iso(),
        )
        record = self._to_dict(row)
        with Session(self.engine) as session:
            session.add(row)
            session.commit()
        logger.info("Recorded run %s (%dx%d, %ss, %d moves)", record["id"], size, size, elapsed_seconds, moves)
        return record

    def top_runs(self, size: int | None = None, limit: int = 10) -> list[dict[str, Any]]:
        with Session(self.engine) as session:
            stmt = select(RunModel)
            if size is not None:
                stmt = stmt.where(RunModel.size == size)
            stmt = stmt.order_by(RunModel.elapsed_seconds, RunModel.moves).limit(max(0, limit))
            rows = session.exec(stmt).all()
            return [self._to_dict(row) for row in rows]

    def close(self) -> None:
        self.engine.dispose()


def open_repo(path: str | Path = config.DEFAULT_DB_PATH):
    """Return SqliteRunRepository for .db paths, JsonRunRepository otherwise."""
    path = Path(path)
    if path.suffix == ".db":
        return SqliteRunRepository(path)
    return JsonRunRepository(path)
