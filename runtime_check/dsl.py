"""Helpers for building checks.

The most basic one is ``check``::

    check("db", ping_db)
    check("billing", [env_var("STRIPE_KEY"), app_var("webhook", "billing", ["stripe", "webhook"])])
    check("search", search_enabled, [check("index", index_exists)])

A checker is a zero-arg function returning ``None``/``Ok(...)`` (passed,
nested checks run), ``IGNORE`` (skipped with its nested checks) or
``Error(reason)`` (failed, nested checks skipped). A check with nested checks
only passes if every nested check passes or is ignored.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Collection, Mapping, Sequence
from typing import Any, Union

from .app_config import MISSING, AppConfigStore, get_app_config, lookup_path
from .check import IGNORE, Check, Checker, CheckerResult, Error
from .flags import FlagStore, get_flag_store

CheckerOrList = Union[Checker, Sequence[Check]]


def check(name: str, checker_or_list: CheckerOrList, nested_checks: Sequence[Check] | None = None) -> Check:
    """Create a check from a function, a list of nested checks, or both.

    ``check(name, fn)``, ``check(name, [checks])`` or ``check(name, fn, [checks])``.
    """
    _validate_name(name)
    if callable(checker_or_list):
        return Check(name, checker_or_list, _nested(nested_checks))
    if nested_checks is not None:
        raise TypeError("check(name, checker, nested_checks) needs a callable checker")
    return Check(name, None, _nested(checker_or_list))


# ── Feature flags ────────────────────────────────────────────────────────────


def feature_check(
    name: str,
    fn_or_list: CheckerOrList,
    nested_checks: Sequence[Check] | None = None,
    *,
    flags: FlagStore | None = None,
) -> Check:
    """Create a check that only runs when the feature flag ``name`` is enabled.

    When the flag is off the check is ignored: its function is not called and
    its nested checks don't run. The other arguments behave like ``check``.
    ``flags`` defaults to the process flag store, looked up when the check runs.
    """
    _validate_name(name)

    if callable(fn_or_list):
        fn = fn_or_list

        def checker() -> CheckerResult:
            if not _flag_enabled(name, flags):
                return IGNORE
            return fn()

        return Check(name, checker, _nested(nested_checks))

    if nested_checks is not None:
        raise TypeError("feature_check(name, fn, nested_checks) needs a callable fn")
    return Check(name, lambda: None if _flag_enabled(name, flags) else IGNORE, _nested(fn_or_list))


def _flag_enabled(name: str, flags: FlagStore | None) -> bool:
    store = flags if flags is not None else get_flag_store()
    return store.is_enabled(name) or store.any_gate_enabled(name)


# ── Environment variables ────────────────────────────────────────────────────


def env_var(var_name: str, *, allow_empty: bool = False, environ: Mapping[str, str] | None = None) -> Check:
    """Check that an environment variable is set, and not empty unless ``allow_empty``.

    The variable name is used as the check name. Meant as a nested check:
    variables that are always required belong in the app's settings class.
    """
    _validate_name(var_name)

    def checker() -> CheckerResult:
        env = os.environ if environ is None else environ
        value = env.get(var_name)
        if value is None:
            return Error(f"Env var {var_name} is missing")
        if value == "" and not allow_empty:
            return Error(f"Env var {var_name} is empty")
        return None

    return Check(var_name, checker)


# ── Application config ───────────────────────────────────────────────────────


def app_var(
    name: str,
    app: str,
    key_or_keys: str | Sequence[str],
    *,
    reject: Collection[Any] = (),
    store: AppConfigStore | None = None,
) -> Check:
    """Check that an application config value is set and not ``None``.

    ``key_or_keys`` is a key, or a key path whose first element is fetched
    from the store and the rest looked up inside that value (mappings or
    attributes). Values in ``reject`` fail the check as well.
    """
    _validate_name(name)
    if isinstance(key_or_keys, str):
        key, key_path = key_or_keys, []
    else:
        keys = list(key_or_keys)
        if not keys:
            raise ValueError("app_var needs at least one key")
        key, key_path = keys[0], keys[1:]

    def checker() -> CheckerResult:
        config = store if store is not None else get_app_config()
        try:
            value = config.fetch_env(app, key)
        except KeyError:
            return Error(f"Key {key} not found in app config for {app}")
        if value is None:
            return Error(f"Value for key {key} is nil in app config for {app}")
        if not key_path:
            return _maybe_reject(key, value, reject)

        nested = lookup_path(value, key_path)
        if nested is MISSING:
            return Error(f"Key path {key_path!r} in key {key} is missing")
        if nested is None:
            return Error(f"Key path {key_path!r} in key {key} is nil")
        return _maybe_reject([key, *key_path], nested, reject)

    return Check(name, checker)


def _maybe_reject(key_or_keys: Any, value: Any, reject: Collection[Any]) -> CheckerResult:
    if _contains(reject, value):
        return Error(f"Value {value!r} is not allowed for {key_or_keys!r}")
    return None


def _contains(values: Collection[Any], value: Any) -> bool:
    # Unhashable values can't be looked up in sets
    try:
        return value in values
    except TypeError:
        return any(v == value for v in values)


# ── Helpers ──────────────────────────────────────────────────────────────────


def _validate_name(name: Any) -> None:
    if not isinstance(name, str) or not name:
        raise TypeError(f"Check name must be a non-empty string, got {name!r}")


def _nested(nested_checks: Sequence[Check] | None) -> tuple[Check, ...]:
    if nested_checks is None:
        return ()
    if isinstance(nested_checks, (str, bytes)) or not isinstance(nested_checks, Sequence):
        raise TypeError(f"Nested checks must be a list of checks, got {nested_checks!r}")
    for nested in nested_checks:
        if not isinstance(nested, Check):
            raise TypeError(f"Not a check: {nested!r}")
    return tuple(nested_checks)
