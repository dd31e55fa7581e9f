from __future__ import annotations

import pathlib
import sys

import pytest

REPO_ROOT = pathlib.Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from slack_mcp.service.catalog import ToolCatalog  # noqa: E402
from slack_mcp.validation import SchemaRegistry  # noqa: E402
from tests.helpers.slack_fakes import FakeSlackClient  # noqa: E402


@pytest.fixture(scope="session")
def repo_root() -> pathlib.Path:
    return REPO_ROOT


@pytest.fixture(autouse=True)
def _slack_tokens(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-test")
    monkeypatch.setenv("SLACK_USER_TOKEN", "xoxp-test")


@pytest.fixture
def registry() -> SchemaRegistry:
    return SchemaRegistry()


@pytest.fixture
def catalog(registry: SchemaRegistry) -> ToolCatalog:
    return ToolCatalog.load(registry)


@pytest.fixture
def bot() -> FakeSlackClient:
    return FakeSlackClient()


@pytest.fixture
def user() -> FakeSlackClient:
    return FakeSlackClient()
