from __future__ import annotations

import json

import pytest

from recordsync.adapters.payload import (
    ImportPayload,
    PayloadError,
    parse_import_unit,
    read_json_lines,
    unit_from_mapping,
)
from recordsync.domain.model import ImportUnit, MetaEntry, TermRef


def test_full_payload_is_staged() -> None:
    unit = unit_from_mapping(
        {
            "id": 123,
            "post": {"title": "Hello", "type": "page", "status": "publish", "color": "red"},
            "meta": [{"meta_key": "views", "meta_value": 10}],
            "taxonomies": [
                {"taxonomy": "category", "name": "Sports", "slug": "sports"},
                {
                    "taxonomy": "category",
                    "name": "Football",
                    "slug": "football",
                    "parent": "sports",
                },
            ],
            "i18n": {"locale": "fi", "master": {"query_key": "gi_id_55"}},
        }
    )

    assert unit.external_id == "123"
    assert unit.body.title == "Hello"
    assert unit.body.record_type == "page"
    assert unit.body.status == "publish"
    assert unit.body.extra == {"color": "red"}
    assert unit.metadata == [MetaEntry("views", 10)]
    assert unit.taxonomies == {
        "category": [
            TermRef(name="Sports", slug="sports"),
            TermRef(name="Football", slug="football", parent_slug="sports"),
        ]
    }
    assert unit.locale is not None
    assert unit.locale.locale == "fi"
    assert unit.locale.master_external_id == "gi_id_55"


def test_meta_mapping_and_plain_field_names() -> None:
    unit = unit_from_mapping(
        {
            "id": "7",
            "body": {"title": "T", "record_type": "post"},
            "meta": {"a": 1, "b": [1, 2]},
            "taxonomies": {"tag": [{"name": "X", "slug": "x", "parent": " "}]},
            "locale": {"locale": "en", "master_id": 3},
        }
    )

    assert unit.body.record_type == "post"
    assert unit.metadata == [MetaEntry("a", 1), MetaEntry("b", [1, 2])]
    assert unit.taxonomies["tag"] == [TermRef(name="X", slug="x")]
    assert unit.locale is not None
    assert unit.locale.master_external_id == "3"


def test_minimal_payload_has_no_locale() -> None:
    unit = parse_import_unit(ImportPayload.model_validate({"id": "1"}))

    assert isinstance(unit, ImportUnit)
    assert unit.locale is None
    assert unit.metadata == []
    assert unit.body.provided() == {}


def test_missing_id_is_a_payload_error() -> None:
    with pytest.raises(PayloadError):
        unit_from_mapping({"post": {"title": "no id"}})


def test_json_lines_skip_blank_and_report_malformed() -> None:
    lines = [
        json.dumps({"id": "1", "post": {"title": "one"}}),
        "",
        "{not json",
        json.dumps({"id": "2", "post": {"title": "two"}}),
    ]

    items = list(read_json_lines(lines))

    assert len(items) == 3
    assert isinstance(items[0], ImportUnit)
    assert isinstance(items[1], PayloadError)
    assert items[1].line == 3
    assert isinstance(items[2], ImportUnit)
    assert items[2].external_id == "2"
