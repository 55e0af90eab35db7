"""Tests for the FastAPI lifespan integration."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from runtime_check.check import Error
from runtime_check.dsl import check, env_var
from runtime_check.gate import RuntimeCheck, RuntimeCheckFailed
from runtime_check.lifespan import runtime_check_lifespan


class EnvChecks(RuntimeCheck):
    log = False

    def checks(self):
        return [env_var("LIFESPAN_TEST_VAR")]


class DisabledChecks(RuntimeCheck):
    def should_run(self) -> bool:
        return False

    def checks(self):
        return [check("never", lambda: Error("should not run"))]


def _app(gate: RuntimeCheck, inner=None) -> FastAPI:
    app = FastAPI(lifespan=runtime_check_lifespan(gate, inner))

    @app.get("/ping")
    def ping() -> dict[str, str]:
        return {"status": "ok"}

    return app


class TestLifespan:
    def test_starts_when_checks_pass(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LIFESPAN_TEST_VAR", "set")
        app = _app(EnvChecks())

        with TestClient(app) as client:
            assert client.get("/ping").json() == {"status": "ok"}
            assert app.state.runtime_check.ok

    def test_refuses_to_start_when_checks_fail(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LIFESPAN_TEST_VAR", raising=False)
        app = _app(EnvChecks())

        with pytest.raises(RuntimeCheckFailed) as exc_info:
            with TestClient(app):
                pass
        assert exc_info.value.outcome.report == {"LIFESPAN_TEST_VAR": "Env var LIFESPAN_TEST_VAR is missing"}

    def test_disabled_gate(self) -> None:
        app = _app(DisabledChecks())
        with TestClient(app) as client:
            assert client.get("/ping").status_code == 200
            assert app.state.runtime_check is None

    def test_wraps_inner_lifespan(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LIFESPAN_TEST_VAR", "set")
        events: list[str] = []

        @asynccontextmanager
        async def inner(app: FastAPI) -> AsyncIterator[None]:
            events.append("startup")
            yield
            events.append("shutdown")

        with TestClient(_app(EnvChecks(), inner)):
            assert events == ["startup"]
        assert events == ["startup", "shutdown"]

    def test_inner_not_started_on_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LIFESPAN_TEST_VAR", raising=False)
        events: list[str] = []

        @asynccontextmanager
        async def inner(app: FastAPI) -> AsyncIterator[None]:
            events.append("startup")
            yield

        with pytest.raises(RuntimeCheckFailed):
            with TestClient(_app(EnvChecks(), inner)):
                pass
        assert events == []
