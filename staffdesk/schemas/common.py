"""Shared pydantic configuration and the ``{success, data, count}`` response envelope."""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for every wire schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self, **kwargs: Any) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", **kwargs)


class Envelope(BaseModel):
    """Every response body. Extra top-level keys (login's ``token``/``user``) are kept."""

    model_config = ConfigDict(extra="allow")

    success: bool = True
    data: Any = None
    count: int | None = None
    error: str | None = None


def envelope(data: Any = None, *, count: int | None = None, **extra: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": True, "data": _to_plain(data)}
    if count is not None:
        payload["count"] = count
    payload.update(extra)
    return payload


def listing(items: Iterable[ApiModel]) -> dict[str, Any]:
    rows = [_to_plain(item) for item in items]
    return envelope(rows, count=len(rows))


def _to_plain(value: Any) -> Any:
    if isinstance(value, ApiModel):
        return value.to_wire()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    return value
