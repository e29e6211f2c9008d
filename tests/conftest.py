import asyncio
import os
import pytest
from typing import Any, Dict, List, Optional
from typer.testing import CliRunner

from ganjoorcli.domain.interfaces.http_transport import HttpTransport, TransportResponse
from ganjoorcli.domain.models.catalog import Verse
from ganjoorcli.domain.models.common import ResourceId
from ganjoorcli.infrastructure.config import settings
from ganjoorcli.infrastructure.session.token_store import InMemorySessionStore


class ScriptedTransport(HttpTransport):
    """HttpTransport double that replays queued responses and records every call."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses: List[Any] = list(responses or [])
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def queue(self, status_code: int, body: Any = None) -> "ScriptedTransport":
        self.responses.append(TransportResponse(status_code=status_code, body=body))
        return self

    async def send(self, method, path, *, params=None, json=None, headers=None):
        self.calls.append({
            'method': method, 'path': path, 'params': params,
            'json': json, 'headers': dict(headers or {}),
        })
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {path}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self) -> None:
        self.closed = True


class RecordingSleep:
    """Fake clock: records requested delays instead of waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        # Yield to the loop like a real sleep would
        await asyncio.sleep(0)


def make_verse(position: int, order: int, text: Optional[str] = None, poem: int = 1) -> Verse:
    return Verse(
        id=ResourceId(order),
        poem=ResourceId(poem),
        order=order,
        position=position,
        text=text if text is not None else f"verse {order}",
    )


def make_verses(codes: List[int]) -> List[Verse]:
    return [make_verse(code, order) for order, code in enumerate(codes, start=1)]


@pytest.fixture
def transport():
    return ScriptedTransport()


@pytest.fixture
def fake_sleep():
    return RecordingSleep()


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keeps tests away from the developer's real config, .env and session file."""
    for key in list(os.environ):
        if key.startswith(settings.ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(settings, "_loaded", True)
    monkeypatch.setattr(settings, "_config", {})
    monkeypatch.setattr(settings, "_overrides", {})
    settings.set_config_for_testing({'session.file': str(tmp_path / "session.json")})
    yield
    settings.clear_test_config()


@pytest.fixture
def verses_from_codes():
    """Builds a verse sequence (orders 1..n) from a list of position codes."""
    return make_verses
