import asyncio
import logging

import httpx
import pytest

from clients.validator_rules import ValidatorRules
from core.cache import InMemoryCache
from core.models import RuntimeConfig


class DummyMCP:
    """Minimal FastMCP stand-in to capture tool and resource registration."""

    def __init__(self) -> None:
        self.tools = {}
        self.resources = {}

    def tool(self, *, name: str):
        def _decorator(fn):
            self.tools[name] = fn
            return fn
        return _decorator

    def resource(self, uri: str, **kwargs):
        def _decorator(fn):
            self.resources[uri] = fn
            return fn
        return _decorator


class FakeVersionSource:
    """Returns queued versions and records every call."""

    def __init__(self, *versions: str, error: Exception = None) -> None:
        self.versions = list(versions) or ["011234567890123"]
        self.error = error
        self.calls = []
        self.gate = None  # optional asyncio.Event the call waits on

    async def current_version(self, *, amp_url_prefix=None, lts=False) -> str:
        self.calls.append({"amp_url_prefix": amp_url_prefix, "lts": lts})
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if len(self.versions) > 1:
            return self.versions.pop(0)
        return self.versions[0]


class FakeFetcher:
    """Serves canned responses per URL; unknown URLs answer 404."""

    def __init__(self, routes=None) -> None:
        self.routes = dict(routes or {})
        self.calls = []

    async def fetch(self, url: str) -> httpx.Response:
        self.calls.append(url)
        val = self.routes.get(url)
        if isinstance(val, Exception):
            raise val
        if val is None:
            return httpx.Response(404, text="not found")
        status, text = val
        return httpx.Response(status, text=text)


RAW_RULES = {
    "tags": [
        {"tagName": "HTML", "htmlFormat": ["AMP", "AMP4EMAIL"]},
        {
            "tagName": "SCRIPT",
            "htmlFormat": ["AMP"],
            "extensionSpec": {"name": "amp-carousel", "version": ["0.1", "0.2"], "latestVersion": "0.2"},
        },
    ],
    "errors": [{"code": "MANDATORY_TAG_MISSING", "format": "The mandatory tag '%1' is missing."}],
}


class FakeRulesProvider:
    def __init__(self, raw=None, error: Exception = None) -> None:
        self.raw = raw or RAW_RULES
        self.error = error
        self.calls = []

    async def fetch(self, *, rules=None) -> ValidatorRules:
        self.calls.append(rules)
        if rules is not None:
            return ValidatorRules(rules)
        if self.error is not None:
            raise self.error
        return ValidatorRules(self.raw)


@pytest.fixture
def dummy_mcp():
    return DummyMCP()


@pytest.fixture
def cache():
    return InMemoryCache(max_items=64)


@pytest.fixture
def clock(monkeypatch):
    """Controllable wall clock for max-age stamps."""
    import core.max_age as max_age_mod

    t = {"now": 1_000_000.0}
    monkeypatch.setattr(max_age_mod.time, "time", lambda: t["now"])
    return t


@pytest.fixture
def test_logger():
    return logging.getLogger("amp_runtime.tests")


@pytest.fixture
def make_config(test_logger):
    def _make(*, fetch=None, runtime_version=None, **kwargs):
        return RuntimeConfig(
            fetch=fetch or FakeFetcher(),
            runtime_version=runtime_version or FakeVersionSource(),
            log=test_logger,
            **kwargs,
        )
    return _make


async def yield_to_loop(times: int = 3) -> None:
    for _ in range(times):
        await asyncio.sleep(0)
