import json
import sys
from pathlib import Path

import pytest

# Make "src/" importable without an editable install.
SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests with no network access")


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, json_raises=False, text=None):
        self.status_code = status_code
        self._json_data = json_data
        self._json_raises = json_raises
        if text is None:
            text = "" if json_data is None else json.dumps(json_data)
        self.text = text
        self.content = text.encode("utf-8")

    def json(self):
        if self._json_raises or self._json_data is None:
            raise ValueError("Invalid JSON")
        return self._json_data


def _make_page(start, count, included=0):
    return {
        "data": [{"type": "Person", "id": str(start + i)} for i in range(count)],
        "included": [{"type": "Email", "id": f"e{start + i}"} for i in range(included)],
        "meta": {"count": count},
    }


@pytest.fixture
def fake_response():
    """Factory for requests.Response stand-ins."""
    return FakeResponse


@pytest.fixture
def make_page():
    """Factory for JSON:API pages with ``count`` records numbered from ``start``."""
    return _make_page


@pytest.fixture
def pco_env(monkeypatch):
    monkeypatch.setenv("PCO_APPLICATION_ID", "app-id")
    monkeypatch.setenv("PCO_SECRET", "secret")
    monkeypatch.delenv("PCO_API_HOST", raising=False)
    monkeypatch.delenv("PCO_TIMEOUT_SEC", raising=False)
    monkeypatch.delenv("PCO_MAX_RETRIES", raising=False)
