"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import pytest

from ministate.adapters import JsonAdapter, ModelCsvAdapter, YamlAdapter
from ministate.registry import AdapterRegistry
from ministate.service_layer import AppContext


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tests.fixtures.records import Item  # noqa: E402


# Complete test environment that overrides every MINISTATE_* setting
TEST_ENV = {
    "MINISTATE_RESOURCES_PATH": "resources",
    "MINISTATE_DEFAULT_STRATEGY": "replace",
    "MINISTATE_LOG_LEVEL": "info",
    "MINISTATE_JSON_LOGS": "false",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset MINISTATE_* variables before each test."""
    for key in list(os.environ):
        if key.startswith("MINISTATE_") and key not in TEST_ENV:
            monkeypatch.delenv(key, raising=False)
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def items() -> list[Item]:
    return [
        Item(id=1, name="milk"),
        Item(id=2, name="bread, rye", done=True),
        Item(id=3, name='say "hi"', note="quoted"),
    ]


@pytest.fixture
def resources_dir(tmp_path: Path) -> Path:
    path = tmp_path / "resources"
    path.mkdir()
    return path


@pytest.fixture
def registry() -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.register("Shop", JsonAdapter(Item))
    registry.register("Shop", YamlAdapter(Item))
    registry.register("Shop", ModelCsvAdapter(Item))
    return registry


@pytest.fixture
def context(registry: AdapterRegistry, resources_dir: Path) -> AppContext:
    return AppContext("Shop", registry, resources_path=resources_dir)
