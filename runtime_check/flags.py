"""Feature flag stores consulted by ``feature_check``.

A store answers two questions about a flag: is its boolean gate on, and is
any of its gates on (e.g. only enabled for one actor or group). A feature
check runs when either is true.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .config import settings

logger = logging.getLogger(__name__)

TRUTHY = frozenset({"1", "true", "yes", "on"})


@runtime_checkable
class FlagStore(Protocol):
    def is_enabled(self, name: str) -> bool: ...

    def any_gate_enabled(self, name: str) -> bool: ...


# ── In-memory store ──────────────────────────────────────────────────────────


class GateType(str, Enum):
    BOOLEAN = "boolean"
    ACTOR = "actor"
    GROUP = "group"


@dataclass(frozen=True)
class Gate:
    type: GateType
    enabled: bool
    target: str | None = None  # actor id / group name


@dataclass
class Flag:
    name: str
    gates: list[Gate] = field(default_factory=list)

    def boolean_enabled(self) -> bool:
        return any(g.enabled for g in self.gates if g.type is GateType.BOOLEAN)

    def any_enabled(self) -> bool:
        return any(g.enabled for g in self.gates)


def actor_id(actor: Any) -> str:
    """Identifier for an actor: its ``flag_id`` attribute if set, else str()."""
    value = getattr(actor, "flag_id", None)
    return str(value) if value is not None else str(actor)


class InMemoryFlagStore:
    """Dict-backed flag store. Handy for tests and local development."""

    def __init__(self) -> None:
        self._flags: dict[str, Flag] = {}

    def get_flag(self, name: str) -> Flag | None:
        return self._flags.get(name)

    def all_flag_names(self) -> list[str]:
        return list(self._flags)

    def enable(self, name: str, for_actor: Any = None, for_group: str | None = None) -> Flag:
        return self._put(name, _gate_for(True, for_actor, for_group))

    def disable(self, name: str, for_actor: Any = None, for_group: str | None = None) -> Flag:
        return self._put(name, _gate_for(False, for_actor, for_group))

    def clear(self, name: str | None = None) -> None:
        if name is None:
            self._flags.clear()
        else:
            self._flags.pop(name, None)

    def is_enabled(self, name: str) -> bool:
        flag = self._flags.get(name)
        return flag.boolean_enabled() if flag else False

    def any_gate_enabled(self, name: str) -> bool:
        flag = self._flags.get(name)
        return flag.any_enabled() if flag else False

    def _put(self, name: str, gate: Gate) -> Flag:
        flag = self._flags.get(name) or Flag(name=name)
        # Same type + target replaces the previous gate
        gates = [g for g in flag.gates if (g.type, g.target) != (gate.type, gate.target)]
        flag = Flag(name=name, gates=[gate, *gates])
        self._flags[name] = flag
        return flag


def _gate_for(enabled: bool, for_actor: Any, for_group: str | None) -> Gate:
    if for_actor is not None and for_group is not None:
        raise ValueError("Pass either for_actor or for_group, not both")
    if for_actor is not None:
        return Gate(GateType.ACTOR, enabled, actor_id(for_actor))
    if for_group is not None:
        return Gate(GateType.GROUP, enabled, for_group)
    return Gate(GateType.BOOLEAN, enabled)


# ── Environment store ────────────────────────────────────────────────────────


class EnvFlagStore:
    """Flags read from environment variables, e.g. ``FEATURE_PAYMENTS=true``.

    Environment flags only have a boolean gate, so ``any_gate_enabled`` is
    the same as ``is_enabled``.
    """

    def __init__(self, prefix: str | None = None, environ: Mapping[str, str] | None = None) -> None:
        self.prefix = settings.flag_env_prefix if prefix is None else prefix
        self._environ = environ

    def var_name(self, name: str) -> str:
        return f"{self.prefix}{name}".upper()

    def is_enabled(self, name: str) -> bool:
        environ = os.environ if self._environ is None else self._environ
        value = environ.get(self.var_name(name), "")
        return value.strip().lower() in TRUTHY

    def any_gate_enabled(self, name: str) -> bool:
        return self.is_enabled(name)


# ── Process default ──────────────────────────────────────────────────────────

_default_store: FlagStore = InMemoryFlagStore()


def get_flag_store() -> FlagStore:
    return _default_store


def set_flag_store(store: FlagStore) -> FlagStore:
    """Replace the process default store. Returns the previous one."""
    global _default_store
    if not isinstance(store, FlagStore):
        raise TypeError(f"Not a flag store: {store!r}")
    previous, _default_store = _default_store, store
    logger.debug("Flag store set to %s", type(store).__name__)
    return previous
