"""Applying update specs (``$set``-style modifiers or a replacement document)."""
from __future__ import annotations

import copy
from typing import Any, Dict

from .query import MISSING, get_field

MODIFIERS = ("$set", "$unset", "$inc", "$push")


def _parent(doc: Dict[str, Any], path: str, create: bool):
    parts = path.split(".")
    cur = doc
    for part in parts[:-1]:
        nxt = cur.get(part) if isinstance(cur, dict) else None
        if not isinstance(nxt, dict):
            if not create:
                return None, parts[-1]
            nxt = {}
            cur[part] = nxt
        cur = nxt
    return cur, parts[-1]


def set_path(doc: Dict[str, Any], path: str, value: Any):
    parent, leaf = _parent(doc, path, create=True)
    parent[leaf] = value


def unset_path(doc: Dict[str, Any], path: str):
    parent, leaf = _parent(doc, path, create=False)
    if parent is not None:
        parent.pop(leaf, None)


def is_modifier_update(update: Dict[str, Any]) -> bool:
    keys = list(update)
    dollar = [k for k in keys if str(k).startswith("$")]
    if dollar and len(dollar) != len(keys):
        raise ValueError("Cannot mix update modifiers with plain fields")
    return bool(dollar)


def sets_field(update: Dict[str, Any], field: str) -> bool:
    if is_modifier_update(update):
        return field in (update.get("$set") or {}) or field in (update.get("$unset") or {})
    return field in update


def apply_update(doc: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """Return a new document with ``update`` applied to ``doc``."""
    if not isinstance(update, dict):
        raise TypeError("update must be a dict")
    if not is_modifier_update(update):
        replaced = copy.deepcopy(update)
        for kept in ("id", "created_at"):
            if kept in doc and kept not in replaced:
                replaced[kept] = doc[kept]
        return replaced

    new = copy.deepcopy(doc)
    for op, fields in update.items():
        if op not in MODIFIERS:
            raise ValueError(f"Unsupported update modifier: {op}")
        for path, value in (fields or {}).items():
            if op == "$set":
                set_path(new, path, copy.deepcopy(value))
            elif op == "$unset":
                unset_path(new, path)
            elif op == "$inc":
                current = get_field(new, path)
                if current is MISSING:
                    set_path(new, path, value)
                elif isinstance(current, (int, float)) and not isinstance(current, bool):
                    set_path(new, path, current + value)
                else:
                    raise ValueError(f"Cannot $inc non-numeric field '{path}'")
            elif op == "$push":
                current = get_field(new, path)
                if current is MISSING:
                    set_path(new, path, [copy.deepcopy(value)])
                elif isinstance(current, list):
                    current.append(copy.deepcopy(value))
                else:
                    raise ValueError(f"Cannot $push to non-array field '{path}'")
    return new


def upsert_document(query: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """Seed document for an upsert: the query's equality fields plus the update."""
    base = {
        k: copy.deepcopy(v) for k, v in (query or {}).items()
        if not str(k).startswith("$") and not (isinstance(v, dict) and any(str(x).startswith("$") for x in v))
    }
    if is_modifier_update(update):
        return apply_update(base, update)
    merged = dict(base)
    merged.update(copy.deepcopy(update))
    return merged
