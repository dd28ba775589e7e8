"""Client-side filtering and sorting over lists already fetched in full."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Sequence

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Filter values meaning "no filter".
MATCH_ALL = (None, "", "all")


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match, for search boxes."""

    needle: str

    def matches(self, value: Any) -> bool:
        if not self.needle:
            return True
        if value is None:
            return False
        return self.needle.casefold() in str(value).casefold()


def _field(record: Mapping[str, Any], key: str) -> Any:
    value: Any = record
    for part in key.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def _matches(record: Mapping[str, Any], key: str, criterion: Any) -> bool:
    if "|" in key:
        return any(_matches(record, part.strip(), criterion) for part in key.split("|"))
    if isinstance(criterion, (list, tuple, set, frozenset)):
        return any(_matches(record, key, option) for option in criterion)
    if isinstance(criterion, Contains):
        return criterion.matches(_field(record, key))
    if criterion in MATCH_ALL:
        return True
    return _field(record, key) == criterion


def _parse_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return EPOCH
    else:
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _sort_key(value: Any, is_date: bool) -> tuple:
    # (missing, type rank, value); numbers rank before strings.
    if is_date:
        return (0, 0, _parse_date(value))
    if value is None:
        return (1, 0, "")
    if isinstance(value, bool):
        return (0, 0, int(value))
    if isinstance(value, (int, float)):
        return (0, 0, value)
    return (0, 1, str(value).casefold())


def filter_and_sort(
    records: Iterable[Mapping[str, Any]],
    filters: Mapping[str, Any] | None = None,
    *,
    sort_by: str | None = None,
    order: str = "desc",
    date_fields: Sequence[str] = ("createdAt", "uploadDate", "checkInTime", "weekStartDate", "updatedAt"),
) -> list[Mapping[str, Any]]:
    """Return ``records`` narrowed by ``filters`` and ordered by ``sort_by``.

    ``filters`` maps a field (dotted for nested values, ``a|b`` for "either
    field") to an exact value, a ``Contains`` or a collection of either.
    Exact values of ``None``, ``""`` or ``"all"`` do not filter. Date fields
    sort chronologically with missing or unparseable values treated as the
    epoch; other strings compare case-insensitively and missing values sort
    last in ascending order. The sort is stable and the input is not modified.
    """

    if order not in ("asc", "desc"):
        raise ValueError(f"order must be 'asc' or 'desc', not {order!r}")

    selected = [
        record
        for record in records
        if all(_matches(record, key, criterion) for key, criterion in (filters or {}).items())
    ]
    if sort_by is None:
        return selected

    is_date = sort_by in date_fields
    return sorted(
        selected,
        key=lambda record: _sort_key(_field(record, sort_by), is_date),
        reverse=order == "desc",
    )


def count_by(records: Iterable[Mapping[str, Any]], key: str) -> dict[str, int]:
    """Tally records per value of ``key``, e.g. documents per verification status."""

    return dict(Counter(str(_field(record, key)) for record in records))


__all__ = ["Contains", "filter_and_sort", "count_by", "MATCH_ALL"]
