"""Tests for the feature flag stores."""

from __future__ import annotations

import pytest

from runtime_check.flags import (
    EnvFlagStore,
    FlagStore,
    GateType,
    InMemoryFlagStore,
    get_flag_store,
    set_flag_store,
)


class TestInMemoryFlagStore:
    def test_unknown_flag_is_off(self) -> None:
        store = InMemoryFlagStore()
        assert not store.is_enabled("nope")
        assert not store.any_gate_enabled("nope")
        assert store.get_flag("nope") is None

    def test_enable_and_disable(self) -> None:
        store = InMemoryFlagStore()
        store.enable("search")
        assert store.is_enabled("search")

        store.disable("search")
        assert not store.is_enabled("search")
        assert len(store.get_flag("search").gates) == 1

    def test_actor_gate(self) -> None:
        store = InMemoryFlagStore()
        flag = store.enable("beta", for_actor="user:1")

        assert flag.gates[0].type is GateType.ACTOR
        assert flag.gates[0].target == "user:1"
        assert not store.is_enabled("beta")
        assert store.any_gate_enabled("beta")

    def test_group_gate(self) -> None:
        store = InMemoryFlagStore()
        store.enable("beta", for_group="staff")
        store.disable("beta")
        assert store.any_gate_enabled("beta")
        assert not store.is_enabled("beta")
        assert store.all_flag_names() == ["beta"]

    def test_actor_and_group_together_rejected(self) -> None:
        with pytest.raises(ValueError):
            InMemoryFlagStore().enable("beta", for_actor="a", for_group="g")

    def test_clear(self) -> None:
        store = InMemoryFlagStore()
        store.enable("a")
        store.enable("b")
        store.clear("a")
        assert store.all_flag_names() == ["b"]
        store.clear()
        assert store.all_flag_names() == []

    def test_is_a_flag_store(self) -> None:
        assert isinstance(InMemoryFlagStore(), FlagStore)
        assert isinstance(EnvFlagStore(), FlagStore)


class TestEnvFlagStore:
    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes", " on "])
    def test_truthy_values(self, value: str) -> None:
        store = EnvFlagStore(environ={"FEATURE_SEARCH": value})
        assert store.is_enabled("search")
        assert store.any_gate_enabled("search")

    @pytest.mark.parametrize("value", ["", "0", "false", "off", "nope"])
    def test_falsy_values(self, value: str) -> None:
        assert not EnvFlagStore(environ={"FEATURE_SEARCH": value}).is_enabled("search")

    def test_missing_is_off(self) -> None:
        assert not EnvFlagStore(environ={}).is_enabled("search")

    def test_custom_prefix(self) -> None:
        store = EnvFlagStore(prefix="FF_", environ={"FF_PAYMENTS": "true"})
        assert store.var_name("payments") == "FF_PAYMENTS"
        assert store.is_enabled("payments")

    def test_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FEATURE_FROM_OS", "on")
        assert EnvFlagStore().is_enabled("from_os")


class TestDefaultStore:
    def test_set_and_restore(self) -> None:
        store = InMemoryFlagStore()
        previous = set_flag_store(store)
        try:
            assert get_flag_store() is store
        finally:
            set_flag_store(previous)
        assert get_flag_store() is previous

    def test_rejects_non_store(self) -> None:
        with pytest.raises(TypeError):
            set_flag_store(object())  # type: ignore[arg-type]
