from typing import Any

import orjson

# orjson only serializes integers that fit in 64 bits
_MIN_JSON_INT = -(2**63)
_MAX_JSON_INT = 2**64 - 1


def _normalize(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value if _MIN_JSON_INT <= value <= _MAX_JSON_INT else str(value)
    if isinstance(value, dict):
        return {key: _normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    """
    Serializes a value to compact JSON that is stable across calls.
    Mapping keys are sorted, list order is kept and unknown types
    (Decimal, enums) as well as integers beyond 64 bits fall back to
    their string form.
    """
    return orjson.dumps(_normalize(value), default=str, option=orjson.OPT_SORT_KEYS).decode("utf-8")


def build_cache_key(kind: str, operation: str, caller: str, args: Any, network: str, block: Any) -> str:
    """Builds `{kind}:{operation}:{caller}:{args}:{network}:{block}`."""
    return f"{kind}:{operation}:{caller}:{canonical_json(args)}:{network}:{block}"
