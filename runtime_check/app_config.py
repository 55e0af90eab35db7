"""Application config store — namespaced settings checked by ``app_var``.

Values are stored per application namespace::

    store.put_env("billing", "stripe", {"api_key": "sk_..."})
    store.fetch_env("billing", "stripe")            # {"api_key": "sk_..."}
    lookup_path(store.fetch_env("billing", "stripe"), ["api_key"])

Namespaces can also be loaded from YAML.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from collections.abc import Set as AbstractSet
from numbers import Number
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Values with no config fields of their own
SCALARS = (str, bytes, bytearray, Number, bool)


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class AppConfigStore:
    """In-memory ``app -> key -> value`` store."""

    def __init__(self, data: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._apps: dict[str, dict[str, Any]] = {}
        for app, values in (data or {}).items():
            self._apps[app] = dict(values)

    def put_env(self, app: str, key: str, value: Any) -> None:
        self._apps.setdefault(app, {})[key] = value

    def delete_env(self, app: str, key: str) -> None:
        self._apps.get(app, {}).pop(key, None)

    def fetch_env(self, app: str, key: str) -> Any:
        """Value for ``key`` in ``app``. Raises KeyError if not set (``None`` is a value)."""
        try:
            return self._apps[app][key]
        except KeyError:
            raise KeyError(f"{app}.{key}") from None

    def get_env(self, app: str, key: str, default: Any = None) -> Any:
        return self._apps.get(app, {}).get(key, default)

    def apps(self) -> list[str]:
        return list(self._apps)

    def load_yaml(self, path: Path | str, app: str | None = None) -> None:
        """Merge a YAML file into the store.

        Without ``app`` the file maps app names to their settings; with it,
        the file holds that single app's settings.
        """
        path = Path(path)
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load app config %s: %s", path, e)
            raise

        if not isinstance(raw, Mapping):
            raise ValueError(f"App config {path} must be a mapping, got {type(raw).__name__}")

        sections = {app: raw} if app is not None else raw
        for name, values in sections.items():
            if not isinstance(values, Mapping):
                raise ValueError(f"App config {path}: section {name!r} must be a mapping")
            self._apps.setdefault(str(name), {}).update(values)

        logger.info("Loaded app config from %s (%d apps)", path, len(sections))


def lookup_path(value: Any, path: Iterable[Any]) -> Any:
    """Walk ``path`` into ``value``. Returns ``MISSING`` if any segment is absent.

    Mappings are looked up by key and lists by integer index. Other objects
    (dataclasses, pydantic models) by public, non-callable attribute. Scalars
    and sets have no segments.
    """
    current = value
    for segment in path:
        current = _lookup(current, segment)
        if current is MISSING:
            return MISSING
    return current


def _lookup(value: Any, segment: Any) -> Any:
    if value is None:
        return MISSING
    if isinstance(value, Mapping):
        return value.get(segment, MISSING)
    if isinstance(value, SCALARS + (AbstractSet,)):
        return MISSING
    if isinstance(value, Sequence):
        if not isinstance(segment, int):
            return MISSING
        try:
            return value[segment]
        except IndexError:
            return MISSING
    if isinstance(segment, str) and not segment.startswith("_"):
        # Methods are not config values
        found = getattr(value, segment, MISSING)
        return MISSING if callable(found) else found
    return MISSING


# ── Process default ──────────────────────────────────────────────────────────

_default_store = AppConfigStore()


def get_app_config() -> AppConfigStore:
    return _default_store


def set_app_config(store: AppConfigStore) -> AppConfigStore:
    """Replace the process default store. Returns the previous one."""
    global _default_store
    previous, _default_store = _default_store, store
    return previous
