"""Pytest session bootstrap.

- Ensure the project root is importable (so ``tests.fakes`` resolves)
- Isolate every test from ``OLLAMAKIT_*`` variables and stray properties files
"""

import os
import sys
from typing import List

import pytest

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from ollamakit.client import OllamaClient  # noqa: E402
from ollamakit.infrastructure.config import settings as settings_module  # noqa: E402
from ollamakit.infrastructure.config.client_config import ClientConfiguration  # noqa: E402


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    for name in list(os.environ):
        if name.upper().startswith("OLLAMAKIT_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(settings_module, "_settings", None)
    yield


@pytest.fixture
def sleeps() -> List[float]:
    """Backoff delays requested by the code under test."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(delay: float) -> None:
        sleeps.append(delay)
    return _sleep


@pytest.fixture
def test_config() -> ClientConfiguration:
    return ClientConfiguration.for_testing()


@pytest.fixture
def make_client(fake_sleep, test_config):
    """Build an ``OllamaClient`` wired to a ``ScriptedServer``."""
    def _make(server, config=None):
        return OllamaClient(config or test_config, transport=server.transport, sleep_fn=fake_sleep)
    return _make
