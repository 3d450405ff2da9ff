"""Tests for mapping module."""

import pytest

from ticket_importer.errors import ConfigError, InvalidColumnLabel
from ticket_importer.mapping import MappingConfig, load_mapping, mapping_from_entries


def test_system_and_custom_fields(tmp_path):
    path = tmp_path / "mapping.csv"
    path.write_text(
        "kind,field,column\n"
        "system,comment,A\n"
        "system,subject,B\n"
        "system,priority,\n"
        "custom,Order number,AA\n"
        "custom,Product,C\n"
    )
    mapping = load_mapping(str(path))
    assert mapping == MappingConfig(
        comment=0,
        subject=1,
        custom_fields=(("Order number", 26), ("Product", 2)),
    )


def test_empty_labels_are_not_mapped():
    mapping = mapping_from_entries([("system", "comment", "A"), ("custom", "Product", " ")])
    assert mapping.custom_fields == ()
    assert mapping.priority is None


def test_comment_is_required():
    with pytest.raises(ConfigError, match="comment"):
        mapping_from_entries([("system", "subject", "B")])


def test_invalid_column_label():
    with pytest.raises(InvalidColumnLabel):
        mapping_from_entries([("system", "comment", "A1")])


def test_unknown_system_field():
    with pytest.raises(ConfigError, match="Unknown system field"):
        mapping_from_entries([("system", "comment", "A"), ("system", "requester", "B")])


def test_unknown_kind():
    with pytest.raises(ConfigError, match="Unknown mapping kind"):
        mapping_from_entries([("system", "comment", "A"), ("extra", "x", "B")])


def test_missing_columns(tmp_path):
    path = tmp_path / "mapping.csv"
    path.write_text("sheet_col,crm_field\nA,comment\n")
    with pytest.raises(ConfigError, match="missing columns"):
        load_mapping(str(path))


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_mapping(str(tmp_path / "nope.csv"))
