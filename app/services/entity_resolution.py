"""Entity resolution for scraped lawsuit and defendant records.

Identity is computed, never stored:
    lawsuit   -> (case_number, court)
    defendant -> lower-cased, trimmed company_name

Resolution is a single linear pass that keeps the first record seen for each
identity key and drops later ones silently.
"""

from __future__ import annotations

from typing import Any, List, Literal, Optional, Sequence, TypeVar

from app.core.logging import get_logger
from app.core.records import field_value

log = get_logger("entity_resolution")

EntityKind = Literal["lawsuit", "defendant"]

T = TypeVar("T")


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def lawsuit_key(entity: Any) -> Optional[str]:
    """Return ``"<case_number>|<court>"`` or None when either part is missing."""
    case_number = _clean(field_value(entity, "case_number"))
    court = _clean(field_value(entity, "court"))
    if not case_number or not court:
        return None
    return f"{case_number}|{court}"


def defendant_key(entity: Any) -> Optional[str]:
    name = _clean(field_value(entity, "company_name")).lower()
    return name or None


_KEY_FUNCS = {
    "lawsuit": lawsuit_key,
    "defendant": defendant_key,
}


def identity_key(entity: Any, kind: EntityKind) -> Optional[str]:
    try:
        key_func = _KEY_FUNCS[kind]
    except KeyError:
        raise ValueError(f"Unsupported entity kind: {kind!r}")
    return key_func(entity)


def deduplicate(entities: Sequence[T], kind: EntityKind, collapse_missing: bool = False) -> List[T]:
    """Drop records whose identity key was already seen, keeping first occurrences in order.

    Records with a missing identity field have no usable key. They are kept
    as-is (never merged) unless ``collapse_missing`` is set, in which case they
    all share one empty key and only the first survives.
    """
    if kind not in _KEY_FUNCS:
        raise ValueError(f"Unsupported entity kind: {kind!r}")

    unique: List[T] = []
    seen: set[str] = set()
    keyless = 0

    for entity in entities:
        key = identity_key(entity, kind)
        if key is None:
            if not collapse_missing:
                keyless += 1
                unique.append(entity)
                continue
            key = ""

        if key in seen:
            continue
        seen.add(key)
        unique.append(entity)

    if keyless:
        log.warning(f"{keyless} {kind} record(s) missing identity fields; kept without deduplication")

    if len(unique) != len(entities):
        log.debug(f"Deduplicated {kind} records (input={len(entities)} output={len(unique)})")

    return unique
