"""
Typed coercion of raw YAML data into config dataclasses.

`load_typed(tp, value)` walks the annotation `tp` recursively and reports the
dotted path of the first offending field.
"""

from __future__ import annotations

import dataclasses
import sys
import typing as t
from dataclasses import fields, is_dataclass
from enum import Enum
from types import UnionType
from typing import Any, get_args, get_origin

import logging

from ..errors import HbsUserError

_LOG = logging.getLogger(__name__)


class ConfigLoadError(HbsUserError, ValueError):
    """Typed config loading failed; the message starts with the field path."""
    pass


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", str(tp))


def _err(path: str, msg: str) -> ConfigLoadError:
    _LOG.debug("RAISE at %s: %s", path, msg)
    return ConfigLoadError(f"{path}: {msg}")


def _coerce_enum(val: Any, tp: Any, path: str) -> Any:
    if isinstance(val, tp):
        return val
    if isinstance(val, str) and val in tp.__members__:
        return tp[val]
    try:
        return tp(val)
    except ValueError:
        raise _err(path, f"expected enum {_type_name(tp)}, got {val!r}")


def _coerce_union(val: Any, tp: Any, path: str) -> Any:
    errs: list[str] = []
    for sub in get_args(tp):
        # NoneType only matches an explicit None
        if sub is type(None):
            if val is None:
                return None
            continue
        try:
            return load_typed(sub, val, path=path)
        except ConfigLoadError as e:
            errs.append(str(e))
    raise _err(path, " | ".join(errs) or f"no variant of {_type_name(tp)} matched")


def _coerce_mapping(val: Any, tp: Any, path: str) -> Any:
    if not isinstance(val, dict):
        raise _err(path, f"expected dict, got {type(val).__name__}")
    kt, vt = get_args(tp) or (Any, Any)
    return {
        load_typed(kt, k, path=f"{path}.<key>"): load_typed(vt, v, path=f"{path}.{k}")
        for k, v in val.items()
    }


def _coerce_sequence(val: Any, tp: Any, path: str) -> Any:
    origin = get_origin(tp)
    if not isinstance(val, (list, tuple)):
        raise _err(path, f"expected list, got {type(val).__name__}")
    (et,) = get_args(tp)[:1] or (Any,)
    items = [load_typed(et, v, path=f"{path}[{i}]") for i, v in enumerate(val)]
    return tuple(items) if origin is tuple else items


def _coerce_dataclass(val: Any, tp: Any, path: str) -> Any:
    if val is None:
        return tp()
    if not isinstance(val, dict):
        raise _err(path, f"expected mapping for {_type_name(tp)}, got {type(val).__name__}")

    mod = sys.modules.get(tp.__module__)
    hints = t.get_type_hints(tp, globalns=vars(mod) if mod else None)
    fld_map = {f.name: f for f in fields(tp)}

    extras = set(val) - set(fld_map)
    if extras:
        raise _err(path, f"unknown key(s): {sorted(extras)}")

    kwargs: dict[str, Any] = {}
    for name, f in fld_map.items():
        sub_path = f"{path}.{name}"
        if name in val:
            kwargs[name] = load_typed(hints.get(name, f.type), val[name], path=sub_path)
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            raise _err(sub_path, "required field missing")
    return tp(**kwargs)


def load_typed(tp: Any, val: Any, *, path: str = "$") -> Any:
    """
    Coerce `val` into the type described by `tp`.

    Raises:
        ConfigLoadError: On the first value that does not fit its annotation
    """
    origin = get_origin(tp)

    if tp is Any or tp is object:
        return val
    if isinstance(tp, type) and is_dataclass(tp):
        return _coerce_dataclass(val, tp, path)
    if origin in (t.Union, UnionType):
        return _coerce_union(val, tp, path)
    if origin is dict:
        return _coerce_mapping(val, tp, path)
    if origin in (list, tuple):
        return _coerce_sequence(val, tp, path)
    if isinstance(tp, type) and issubclass(tp, Enum):
        return _coerce_enum(val, tp, path)

    if tp in (str, int, float, bool):
        # bool is an int subclass; keep YAML `yes`/`true` out of int fields
        if not isinstance(val, tp) or (tp is not bool and isinstance(val, bool)):
            raise _err(path, f"expected {_type_name(tp)}, got {type(val).__name__}")
        return val

    raise _err(path, f"unsupported annotation {_type_name(tp)}")


__all__ = ["load_typed", "ConfigLoadError"]
