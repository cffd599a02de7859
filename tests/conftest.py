"""
Pytest configuration and shared fixtures.

Provides:
- A throwaway SQLite path per test
- History store fixtures
- The worked example from the docs (O=2, M=4, P=10)
"""

from pathlib import Path

import pytest

from pertcalc.estimation.types import EstimateInput
from pertcalc.storage.history_store import HistoryStore, KeyValueStore


@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "data" / "pertcalc.sqlite"


@pytest.fixture
def kv_store(db_path) -> KeyValueStore:
    return KeyValueStore(db_path=str(db_path))


@pytest.fixture
def history(kv_store) -> HistoryStore:
    return HistoryStore(kv_store, key="pertHistory")


@pytest.fixture
def sample_input() -> EstimateInput:
    return EstimateInput(O=2, M=4, P=10, lam=4, percentiles=(90,), unit="hours")
