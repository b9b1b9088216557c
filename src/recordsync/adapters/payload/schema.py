"""Pydantic models describing import payloads.

The schema checks structure only. Field-level rules (slug syntax, reserved
metadata keys, locale shape) belong to the validator so that they surface as
scoped errors on the unit instead of parse failures.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class PayloadBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class BodyPayload(BaseModel):
    """Flat record fields; unknown fields are kept and routed to ``extra``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title: str | None = None
    content: str | None = None
    excerpt: str | None = None
    status: str | None = None
    record_type: str | None = Field(default=None, alias="type")
    slug: str | None = None

    def flat_fields(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


class MetaPayload(PayloadBaseModel):
    key: str = Field(alias="meta_key")
    value: object = Field(default=None, alias="meta_value")


class TermPayload(PayloadBaseModel):
    name: str
    slug: str
    parent: str | None = None
    description: str | None = None

    _normalize_parent = field_validator("parent", mode="before")(_blank_to_none)


class MasterPayload(PayloadBaseModel):
    query_key: str | None = None
    id: str | None = None

    _normalize_query_key = field_validator("query_key", "id", mode="before")(_blank_to_none)

    @property
    def reference(self) -> str | None:
        return self.query_key or self.id


class LocalePayload(PayloadBaseModel):
    locale: str
    master: MasterPayload | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_master_id(cls, value: object) -> object:
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            master_id = mapping_value.get("master_id")
            if master_id is not None and "master" not in mapping_value:
                data: dict[str, object] = dict(mapping_value)
                data["master"] = {"id": str(master_id)}
                return data
            return mapping_value
        return value


class ImportPayload(PayloadBaseModel):
    """One import unit as delivered by the source system.

    ``meta`` accepts either a list of ``{"meta_key", "meta_value"}`` objects or a
    plain mapping; ``taxonomies`` accepts a mapping of taxonomy name to term list
    or a flat list whose items carry a ``taxonomy`` field.
    """

    id: str
    body: BodyPayload = Field(default_factory=BodyPayload, alias="post")
    meta: list[MetaPayload] = Field(default_factory=list["MetaPayload"])
    taxonomies: dict[str, list[TermPayload]] = Field(
        default_factory=dict["str", "list[TermPayload]"]
    )
    locale: LocalePayload | None = Field(default=None, alias="i18n")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("meta", mode="before")
    @classmethod
    def _normalize_meta(cls, value: object) -> object:
        if isinstance(value, Mapping):
            mapping_value = cast(Mapping[str, object], value)
            return [{"meta_key": key, "meta_value": item} for key, item in mapping_value.items()]
        return value

    @field_validator("taxonomies", mode="before")
    @classmethod
    def _normalize_taxonomies(cls, value: object) -> object:
        if isinstance(value, list):
            grouped: dict[str, list[object]] = {}
            for item in cast(list[object], value):
                if isinstance(item, Mapping):
                    term = dict(cast(Mapping[str, object], item))
                    taxonomy = str(term.pop("taxonomy", ""))
                    grouped.setdefault(taxonomy, []).append(term)
                else:
                    grouped.setdefault("", []).append(item)
            return grouped
        return value
