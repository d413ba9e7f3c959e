import pathlib
import sys
from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
import redis

# Ensure the project root (with the src package) is on the Python path for tests
PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@dataclass
class FunctionalRun:
    feature: str
    details: str


class ExecutionLog:
    def __init__(self) -> None:
        self.entries: List[FunctionalRun] = []

    def record(self, feature: str, details: str) -> None:
        self.entries.append(FunctionalRun(feature=feature, details=details))


def pytest_configure(config: pytest.Config) -> None:
    config.execution_log = ExecutionLog()


@pytest.fixture(scope="session")
def execution_log(pytestconfig: pytest.Config) -> ExecutionLog:
    return pytestconfig.execution_log


def pytest_terminal_summary(
    terminalreporter: Any, exitstatus: int
) -> None:  # type: ignore[override]
    log: ExecutionLog | None = getattr(terminalreporter.config, "execution_log", None)
    if not log or not log.entries:
        return

    terminalreporter.write_sep("=", "Functional scenario highlights")
    for entry in log.entries:
        terminalreporter.write_line(f"- {entry.feature}: {entry.details}")


class FakeStore:
    """In-memory stand-in for redis.Redis get/set."""

    def __init__(self) -> None:
        self.data: Dict[str, bytes] = {}
        self.expiry: Dict[str, Any] = {}
        self.set_calls = 0

    def get(self, name: str) -> Optional[bytes]:
        return self.data.get(name)

    def set(self, name: str, value: bytes, ex=None) -> bool:
        self.set_calls += 1
        self.data[name] = value
        self.expiry[name] = ex
        return True


class DownStore:
    def __init__(self) -> None:
        self.set_calls = 0

    def get(self, name: str) -> Optional[bytes]:
        raise redis.exceptions.ConnectionError("Connection refused")

    def set(self, name: str, value: bytes, ex=None) -> bool:
        self.set_calls += 1
        raise redis.exceptions.ConnectionError("Connection refused")


@dataclass
class FakeSession:
    """Records GET calls and replays canned responses in order."""

    responses: List[Any] = field(default_factory=list)
    calls: List[Dict[str, Any]] = field(default_factory=list)
    headers: Dict[str, str] = field(default_factory=dict)

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _json_response(payload: Any, status_code: int = 200):
    return SimpleNamespace(status_code=status_code, json=lambda: payload, text=str(payload))


def _error_response(status_code: int, text: str = "error"):
    def _json():
        raise ValueError("no json")

    return SimpleNamespace(status_code=status_code, json=_json, text=text)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def paper_payload() -> Dict[str, Any]:
    return {
        "id": 42,
        "title": "Deep Learning for Graphs",
        "abstract": "We study machine learning on graphs.",
        "publisher": "Example Press",
        "authors": [{"name": "David"}, {"name": "Peter"}],
        "references": [
            {"id": 7, "title": "Prior work", "authors": ["A. Smith"], "date": "2019", "raw": "Smith 2019"}
        ],
        "acceptedDate": "",
        "createdDate": "2020-05-01",
        "depositedDate": "2020-05-02T10:11:12",
        "lastUpdate": "2021-01-01T00:00:00Z",
        "publishedDate": "2020-04-30T22:00:00+02:00",
        "updatedDate": None,
        "yearPublished": 2020,
        "deleted": "ALLOWED",
        "disabled": False,
        "unexpectedField": "ignored",
    }


@pytest.fixture
def down_store() -> DownStore:
    return DownStore()


@pytest.fixture
def make_session():
    def _make(*responses: Any) -> FakeSession:
        return FakeSession(responses=list(responses))

    return _make


@pytest.fixture
def json_response():
    return _json_response


@pytest.fixture
def error_response():
    return _error_response
