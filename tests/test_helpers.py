import math

from helpers import (
    _coerce_timestamp,
    _dedupe_preserve_order,
    _format_release_timestamp,
    _parse_id_list,
    coerce_catalog_id,
)


def test_coerce_catalog_id_variants():
    assert coerce_catalog_id(48) == "48"
    assert coerce_catalog_id(48.0) == "48"
    assert coerce_catalog_id(" 48.0 ") == "48"
    assert coerce_catalog_id(None) == ""
    assert coerce_catalog_id(math.nan) == ""
    assert coerce_catalog_id(True) == ""


def test_timestamps():
    assert _coerce_timestamp("911606400") == 911606400
    assert _coerce_timestamp(0) is None
    assert _coerce_timestamp(False) is None
    assert _coerce_timestamp("soon") is None
    assert _format_release_timestamp(911606400) == "1998-11-21"
    assert _format_release_timestamp(None) == ""
    assert _format_release_timestamp(10**15) == ""


def test_dedupe_preserves_first_occurrence():
    assert _dedupe_preserve_order(["b", "a", "b", "", "a", "c"]) == ["b", "a", "c"]


def test_parse_id_list():
    assert _parse_id_list([1, {"id": 2}, "3", "x", None]) == (1, 2, 3)
    assert _parse_id_list("123") == ()
    assert _parse_id_list(None) == ()
