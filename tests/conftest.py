"""Test configuration and fixtures"""

import time

import pytest

from mesmtf.models.diagnosis import DiagnosisRequest, SymptomObservation


class _FakeQuery:
    def __init__(self, client, table):
        self._client = client
        self._table = table
        self._rows = None

    def insert(self, rows):
        self._rows = rows
        return self

    def execute(self):
        if self._client.fail:
            raise ConnectionError("record store unreachable")
        delay, timeout = self._client.delay, self._client.timeout
        if timeout is not None and delay > timeout:
            time.sleep(timeout)
            raise TimeoutError(f"write timed out after {timeout}s")
        if delay:
            time.sleep(delay)
        rows = self._rows if isinstance(self._rows, list) else [self._rows]
        self._client.tables.setdefault(self._table, []).extend(rows)
        return rows


class FakeRecordStore:
    """In-memory stand-in for the Supabase client table API.

    ``timeout`` plays the part of the client request timeout: a write slower
    than it raises before anything is stored.
    """

    def __init__(self, fail: bool = False, delay: float = 0.0, timeout: float | None = None):
        self.fail = fail
        self.delay = delay
        self.timeout = timeout
        self.tables: dict[str, list[dict]] = {}

    def table(self, name):
        return _FakeQuery(self, name)


@pytest.fixture
def record_store():
    return FakeRecordStore()


@pytest.fixture
def failing_record_store():
    return FakeRecordStore(fail=True)


@pytest.fixture
def malaria_request():
    """Fever, chills and sweating, all severe."""
    return DiagnosisRequest(
        selected_symptoms=["Fever", "Chills", "Sweating"],
        observations={
            "Fever": SymptomObservation(severity="severe"),
            "Chills": SymptomObservation(severity="severe"),
            "Sweating": SymptomObservation(severity="severe"),
        },
    )


@pytest.fixture
def slow_record_store():
    """Each write takes 0.5s against a 0.05s request timeout."""
    return FakeRecordStore(delay=0.5, timeout=0.05)


@pytest.fixture
def unbounded_slow_record_store():
    """Slow writes with no request timeout of their own."""
    return FakeRecordStore(delay=0.3)
