"""Unit tests for flowversion.models."""

import pytest
from dataclasses import FrozenInstanceError

from flowversion.models import (
    BranchCategory,
    RawTagMatch,
    VersionComponents,
    VersionTriple,
)


class TestVersionTriple:
    """Tests for parsing and ordering of version triples."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1", VersionTriple(1, 0, 0)),
            ("1.2", VersionTriple(1, 2, 0)),
            ("80.11.4", VersionTriple(80, 11, 4)),
            (" 2.0.1 ", VersionTriple(2, 0, 1)),
        ],
    )
    def test_parse(self, value, expected):
        assert VersionTriple.parse(value) == expected

    @pytest.mark.parametrize("value", ["", "v1.2", "1.2.3.4", "a.b", "1.-2"])
    def test_parse_invalid(self, value):
        with pytest.raises(ValueError):
            VersionTriple.parse(value)

    def test_negative_component_rejected(self):
        with pytest.raises(ValueError):
            VersionTriple(1, -1, 0)

    def test_ordering_is_lexicographic(self):
        assert VersionTriple(1, 10, 0) > VersionTriple(1, 9, 99)
        assert VersionTriple(2, 0, 0) > VersionTriple(1, 99, 99)
        assert VersionTriple(1, 2, 3) == VersionTriple(1, 2, 3)
        assert not VersionTriple(1, 2, 3) > VersionTriple(1, 2, 3)

    def test_from_value_accepts_config_shapes(self):
        expected = VersionTriple(80, 11, 4)
        assert VersionTriple.from_value("80.11.4") == expected
        assert VersionTriple.from_value({"major": 80, "minor": 11, "patch": 4}) == expected
        assert VersionTriple.from_value([80, 11, 4]) == expected
        assert VersionTriple.from_value({"major": 3}) == VersionTriple(3, 0, 0)
        assert VersionTriple.from_value(None) is None
        assert VersionTriple.from_value("") is None

    def test_str(self):
        assert str(VersionTriple(1, 4, 0)) == "1.4.0"


class TestRawTagMatch:
    def test_defaults(self):
        tag = RawTagMatch(major=1, minor=4)
        assert tag.patch == 0
        assert tag.distance == 0
        assert tag.version == VersionTriple(1, 4, 0)


class TestVersionComponents:
    """Tests for the output record."""

    def test_defaults_are_placeholders(self):
        components = VersionComponents()
        record = components.to_dict()
        assert record["VERSION_FLAG"] == "unknown"
        assert record["VERSION_SHORTHASH"] == "unknown"
        assert record["VERSION_FULLHASH"] == "unknown"
        assert record["VERSION_SUCCESS"] is False
        assert None not in record.values()

    def test_to_dict_keys(self):
        assert list(VersionComponents().to_dict()) == [
            "VERSION_MAJOR",
            "VERSION_MINOR",
            "VERSION_PATCH",
            "VERSION_FLAG",
            "VERSION_DISTANCE",
            "VERSION_SHORTHASH",
            "VERSION_FULLHASH",
            "VERSION_STRING",
            "VERSION_ISDIRTY",
            "VERSION_BRANCH",
            "VERSION_SUCCESS",
        ]

    def test_is_immutable(self):
        components = VersionComponents(major=1)
        with pytest.raises(FrozenInstanceError):
            components.major = 2

    def test_from_dict_reads_to_dict_output(self):
        components = VersionComponents(
            major=2,
            minor=0,
            patch=1,
            flag="rc",
            distance=12,
            is_dirty=True,
            short_hash="abc1234",
            full_hash="abc1234" + "0" * 33,
            branch="release/2.0",
            success=True,
            category=BranchCategory.RELEASE,
            version_string="2.0.1-rc.12",
        )
        data = components.to_dict()
        data["VERSION_CATEGORY"] = "release"
        assert VersionComponents.from_dict(data) == components

    def test_from_dict_accepts_cmake_style_values(self):
        components = VersionComponents.from_dict(
            {
                "VERSION_MAJOR": "1",
                "VERSION_MINOR": "4",
                "VERSION_FLAG": "",
                "VERSION_ISDIRTY": "0",
                "VERSION_SUCCESS": "1",
            }
        )
        assert components.version == VersionTriple(1, 4, 0)
        assert components.is_dirty is False
        assert components.success is True
        assert components.category == BranchCategory.MASTER

    def test_from_dict_invalid_number(self):
        with pytest.raises(ValueError):
            VersionComponents.from_dict({"VERSION_MAJOR": "one"})
