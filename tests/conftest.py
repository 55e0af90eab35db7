"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable, Generator

import pytest

from runtime_check.app_config import AppConfigStore, set_app_config
from runtime_check.check import CheckerResult
from runtime_check.flags import InMemoryFlagStore, set_flag_store


@pytest.fixture
def flags() -> Generator[InMemoryFlagStore, None, None]:
    """A fresh process-default flag store with ``enabled_flag`` turned on."""
    store = InMemoryFlagStore()
    store.enable("enabled_flag")
    previous = set_flag_store(store)
    yield store
    set_flag_store(previous)


@pytest.fixture
def app_config() -> Generator[AppConfigStore, None, None]:
    """A fresh process-default app config store."""
    store = AppConfigStore()
    previous = set_app_config(store)
    yield store
    set_app_config(previous)


class Recorder:
    """Records which checkers ran, in order."""

    def __init__(self) -> None:
        self.events: list[str] = []

    def ok(self, event: str) -> Callable[[], CheckerResult]:
        def checker() -> CheckerResult:
            self.events.append(event)
            return None

        return checker

    def returning(self, event: str, result: CheckerResult) -> Callable[[], CheckerResult]:
        def checker() -> CheckerResult:
            self.events.append(event)
            return result

        return checker


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
