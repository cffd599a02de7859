from __future__ import annotations

import json
import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pertcalc.estimation.types import EstimateInput, EstimateResult

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    if parent:
        os.makedirs(parent, exist_ok=True)


@dataclass(frozen=True)
class HistoryEntry:
    input: EstimateInput
    result: EstimateResult
    created_at: str

    @property
    def p90(self) -> Optional[float]:
        return self.result.get(90)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "input": self.input.to_dict(),
            "result": self.result.to_dict(),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HistoryEntry":
        if not isinstance(d, dict):
            raise ValueError(f"History entry must be an object, got {type(d).__name__}")
        created_at = d.get("created_at")
        if not created_at:
            raise ValueError("History entry missing created_at")
        if not isinstance(d.get("input"), dict) or not isinstance(d.get("result"), dict):
            raise ValueError("History entry needs input and result objects")
        return cls(
            input=EstimateInput.from_dict(d["input"]),
            result=EstimateResult.from_dict(d["result"]),
            created_at=str(created_at),
        )


class KeyValueStore:
    """Tiny SQLite key/value blob store.

    Contract: get() returns the last value put() under a key (or None); put() overwrites.
    """

    def __init__(self, db_path: str = "data/pertcalc.sqlite"):
        self.db_path = db_path
        _ensure_parent_dir(db_path)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.db_path)
        con.row_factory = sqlite3.Row
        con.execute("PRAGMA journal_mode=WAL")
        return con

    def _init_db(self) -> None:
        with self._connect() as con:
            con.executescript(
                """
                CREATE TABLE IF NOT EXISTS kv (
                  key TEXT PRIMARY KEY,
                  value_json TEXT NOT NULL,
                  updated_ts_utc TEXT NOT NULL
                );
                """
            )

    def get(self, key: str) -> Optional[str]:
        with self._connect() as con:
            row = con.execute("SELECT value_json FROM kv WHERE key=?", (key,)).fetchone()
        return None if row is None else str(row["value_json"])

    def put(self, key: str, value: str) -> None:
        with self._connect() as con:
            con.execute(
                "INSERT OR REPLACE INTO kv(key, value_json, updated_ts_utc) VALUES (?, ?, ?)",
                (key, value, _utc_now_iso()),
            )

    def delete(self, key: str) -> None:
        with self._connect() as con:
            con.execute("DELETE FROM kv WHERE key=?", (key,))


class HistoryStore:
    """Ordered calculation history (newest first), stored as one JSON blob."""

    def __init__(self, store: KeyValueStore, key: str = "pertHistory"):
        self.store = store
        self.key = key

    def load(self) -> List[HistoryEntry]:
        """Last saved history, or [] if nothing was saved or the blob is corrupted.

        Entries that can't be rehydrated are dropped.
        """
        raw = self.store.get(self.key)
        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as e:
            logger.warning(f"Error loading history ({self.key}): {e!r}; starting empty")
            return []

        if not isinstance(data, list):
            logger.warning(f"Error loading history ({self.key}): expected a list, got {type(data).__name__}")
            return []

        out: List[HistoryEntry] = []
        for i, item in enumerate(data):
            try:
                out.append(HistoryEntry.from_dict(item))
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Dropping malformed history entry #{i}: {e!r}")
        return out

    def save(self, entries: List[HistoryEntry]) -> None:
        self.store.put(self.key, json.dumps([e.to_dict() for e in entries], separators=(",", ":")))
        logger.debug(f"Saved {len(entries)} history entries under {self.key!r}")

    def add(self, inp: EstimateInput, result: EstimateResult, created_at: Optional[str] = None) -> List[HistoryEntry]:
        entries = self.load()
        entries.insert(0, HistoryEntry(input=inp, result=result, created_at=created_at or _utc_now_iso()))
        self.save(entries)
        return entries

    def remove(self, index: int) -> List[HistoryEntry]:
        entries = self.load()
        if index < 0 or index >= len(entries):
            raise IndexError(f"No history entry at index {index}")
        del entries[index]
        self.save(entries)
        return entries

    def clear(self) -> None:
        self.store.delete(self.key)

    def export_history(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "exported_ts_utc": _utc_now_iso(),
            "entries": [e.to_dict() for e in self.load()],
        }

    def import_history(self, exported: Any) -> int:
        """Merge a prior export into the current history.

        Accepts either an export dict or a bare list of entries. Entries whose
        created_at is already present are skipped. Returns the number added.
        """
        items = exported.get("entries") if isinstance(exported, dict) else exported
        if not isinstance(items, list):
            raise ValueError("Export missing entries list")

        try:
            incoming = [HistoryEntry.from_dict(item) for item in items]
        except (KeyError, TypeError, OverflowError) as e:
            raise ValueError(f"Malformed history entry: {e!r}") from e

        entries = self.load()
        seen = {e.created_at for e in entries}
        added = 0
        for e in incoming:
            if e.created_at in seen:
                continue
            entries.append(e)
            seen.add(e.created_at)
            added += 1

        entries.sort(key=lambda e: e.created_at, reverse=True)
        self.save(entries)
        return added
