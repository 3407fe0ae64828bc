"""
Query evaluation shared by every data source.

Both backends funnel reads through ``run_query`` so that switching backends
never changes which documents come back or in which order.
"""
from __future__ import annotations

import copy
import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

Query = Dict[str, Any]
Document = Dict[str, Any]

MISSING = object()

_COMPARISONS = {"$gt", "$gte", "$lt", "$lte"}


@dataclass
class FindOptions:
    sort: Optional[Dict[str, int]] = None
    skip: Optional[int] = None
    limit: Optional[int] = None
    projection: Optional[Dict[str, int]] = None

    @classmethod
    def coerce(cls, value) -> "FindOptions":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls(**dict(value))


@dataclass
class UpdateOptions:
    multi: bool = False
    upsert: bool = False

    @classmethod
    def coerce(cls, value) -> "UpdateOptions":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls(**dict(value))


@dataclass
class DeleteOptions:
    multi: bool = False

    @classmethod
    def coerce(cls, value) -> "DeleteOptions":
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        return cls(**dict(value))


def get_field(doc: Any, path: str) -> Any:
    """Resolve a dotted path, returning ``MISSING`` when any segment is absent."""
    cur = doc
    for part in path.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        elif isinstance(cur, list) and part.isdigit() and int(part) < len(cur):
            cur = cur[int(part)]
        else:
            return MISSING
    return cur


def _same(a: Any, b: Any) -> bool:
    # 1 == True in Python; stored JSON keeps them apart
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def _equals(value: Any, expected: Any) -> bool:
    if value is MISSING:
        return False
    if isinstance(value, list) and not isinstance(expected, list):
        return any(_same(item, expected) for item in value)
    return _same(value, expected)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _compare(value: Any, op: str, arg: Any) -> bool:
    if value is MISSING or value is None:
        return False
    if isinstance(value, list):
        return any(_compare(item, op, arg) for item in value)
    if _is_number(value) and _is_number(arg):
        pass
    elif isinstance(value, str) and isinstance(arg, str):
        pass
    else:
        return False
    if op == "$gt":
        return value > arg
    if op == "$gte":
        return value >= arg
    if op == "$lt":
        return value < arg
    return value <= arg


def _regex(expected: Mapping[str, Any]):
    pattern = expected["$regex"]
    if isinstance(pattern, re.Pattern):
        return pattern
    flags = re.IGNORECASE if "i" in str(expected.get("$options") or "") else 0
    return re.compile(str(pattern), flags)


def _match_operators(value: Any, expected: Mapping[str, Any]) -> bool:
    for op, arg in expected.items():
        if op in _COMPARISONS:
            if not _compare(value, op, arg):
                return False
        elif op == "$ne":
            if _equals(value, arg):
                return False
        elif op == "$in":
            if not any(_equals(value, candidate) for candidate in arg):
                return False
        elif op == "$nin":
            if any(_equals(value, candidate) for candidate in arg):
                return False
        elif op == "$exists":
            if (value is not MISSING) != bool(arg):
                return False
        elif op == "$regex":
            pattern = _regex(expected)
            values = value if isinstance(value, list) else [value]
            if not any(isinstance(v, str) and pattern.search(v) for v in values):
                return False
        elif op == "$options":
            continue
        else:
            raise ValueError(f"Unsupported query operator: {op}")
    return True


def _is_operator_dict(value: Any) -> bool:
    return isinstance(value, dict) and bool(value) and all(str(k).startswith("$") for k in value)


def matches(doc: Mapping[str, Any], query: Optional[Query]) -> bool:
    """True when every key of ``query`` is satisfied by ``doc``."""
    if not query:
        return True
    for key, expected in query.items():
        if key == "$or":
            if not any(matches(doc, sub) for sub in expected):
                return False
        elif key == "$and":
            if not all(matches(doc, sub) for sub in expected):
                return False
        elif key.startswith("$"):
            raise ValueError(f"Unsupported logical operator: {key}")
        elif _is_operator_dict(expected):
            if not _match_operators(get_field(doc, key), expected):
                return False
        elif not _equals(get_field(doc, key), expected):
            return False
    return True


def sort_key(value: Any):
    """Total ordering over JSON values: missing < null < numbers < strings < booleans < arrays < objects."""
    if value is MISSING:
        return (0, 0)
    if value is None:
        return (1, 0)
    if isinstance(value, bool):
        return (4, value)
    if _is_number(value):
        return (2, value)
    if isinstance(value, str):
        return (3, value)
    if isinstance(value, list):
        return (5, json.dumps(value, sort_keys=True, default=str))
    if isinstance(value, dict):
        return (6, json.dumps(value, sort_keys=True, default=str))
    return (7, str(value))


def apply_sort(docs: List[Document], sort: Optional[Mapping[str, int]]) -> List[Document]:
    out = list(docs)
    if not sort:
        return out
    # Python's sort is stable, so sorting by the lowest-priority key first
    # yields the compound ordering.
    for field_name, direction in reversed(list(sort.items())):
        out.sort(key=lambda d, f=field_name: sort_key(get_field(d, f)), reverse=direction < 0)
    return out


def apply_paging(docs: List[Document], skip: Optional[int], limit: Optional[int]) -> List[Document]:
    start = max(int(skip or 0), 0)
    out = docs[start:]
    if limit is not None:
        out = out[:max(int(limit), 0)]
    return out


def apply_projection(docs: Iterable[Document], projection: Optional[Mapping[str, int]]) -> List[Document]:
    if not projection:
        return list(docs)
    include = any(bool(v) for v in projection.values())
    out = []
    for doc in docs:
        if include:
            out.append({k: doc[k] for k, flag in projection.items() if flag and k in doc})
        else:
            out.append({k: v for k, v in doc.items() if k not in projection or projection[k]})
    return out


def filter_documents(docs: Iterable[Document], query: Optional[Query]) -> List[Document]:
    return [d for d in docs if matches(d, query)]


def run_query(docs: Iterable[Document], query: Optional[Query] = None, options=None) -> List[Document]:
    """Filter, sort, page and project ``docs``; returns independent copies."""
    opts = FindOptions.coerce(options)
    result = filter_documents(docs, query)
    result = apply_sort(result, opts.sort)
    result = apply_paging(result, opts.skip, opts.limit)
    result = apply_projection(result, opts.projection)
    return copy.deepcopy(result)
