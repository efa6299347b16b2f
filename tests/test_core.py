"""Tests for core utilities: metadata merging, validation and logging."""

import io

import pytest

from ironsmith import log
from ironsmith.core.metadata import deep_merge, merged
from ironsmith.core.validator import (
    load_schema,
    validate_options_with_error_details,
    validate_record,
)


class TestDeepMerge:
    """Test recursive metadata merging."""

    def test_nested_mappings_merge(self) -> None:
        """Test that mappings merge key-wise at every depth."""
        base = {"site": {"title": "A", "author": {"name": "Jo"}}}

        deep_merge(base, {"site": {"author": {"email": "jo@example.com"}}})

        assert base == {
            "site": {"title": "A", "author": {"name": "Jo", "email": "jo@example.com"}}
        }

    def test_lists_and_scalars_replace(self) -> None:
        """Test that non-mapping values replace."""
        base = {"nav": [1, 2], "count": 1, "site": {"x": 1}}

        deep_merge(base, {"nav": [3], "count": 2, "site": "flat"})

        assert base == {"nav": [3], "count": 2, "site": "flat"}

    def test_merged_values_are_copies(self) -> None:
        """Test that later changes to the update do not leak in."""
        update = {"nav": [1]}
        base: dict = {}

        deep_merge(base, update)
        update["nav"].append(2)

        assert base == {"nav": [1]}

    def test_merged_leaves_inputs_untouched(self) -> None:
        """Test the non-mutating variant."""
        base = {"a": {"b": 1}}

        result = merged(base, {"a": {"c": 2}})

        assert result == {"a": {"b": 1, "c": 2}}
        assert base == {"a": {"b": 1}}


class TestValidator:
    """Test schema validation."""

    def test_schemas_load(self) -> None:
        """Test that both shipped schemas load."""
        assert load_schema("options")["type"] == "object"
        assert "path" in load_schema("file_record")["properties"]

    def test_missing_schema(self) -> None:
        """Test that an unknown schema name fails clearly."""
        with pytest.raises(FileNotFoundError):
            load_schema("nope")

    def test_valid_options(self) -> None:
        """Test that a full valid option set has no problems."""
        problems = validate_options_with_error_details({
            "root_path": ".",
            "source_path": "src",
            "build_path": "build",
            "assets_path": "assets",
            "load_source": True,
            "load_assets": False,
            "clean": True,
            "metadata": {"site": {"title": "x"}},
            "verbose": 2,
        })

        assert problems == {}

    @pytest.mark.parametrize("verbose", [True, False, 0, 1, 2])
    def test_verbose_values(self, verbose) -> None:
        """Test accepted verbosity values."""
        assert validate_options_with_error_details({"verbose": verbose}) == {}

    def test_problems_per_key(self) -> None:
        """Test that each offending key is reported by name."""
        problems = validate_options_with_error_details({
            "clean": "yes",
            "verbose": 5,
            "metadata": [],
            "unknown": 1,
            "build_path": "ok",
        })

        assert set(problems) == {"clean", "verbose", "metadata", "unknown"}

    def test_valid_record(self) -> None:
        """Test that a well-formed record passes."""
        validate_record({"asset": False, "contents": b"", "path": "a.txt", "tags": []})

    def test_record_duplicate_tags(self) -> None:
        """Test that duplicate tags are rejected."""
        from jsonschema import ValidationError

        with pytest.raises(ValidationError):
            validate_record({"asset": False, "contents": b"", "path": "a", "tags": ["x", "x"]})


class TestLog:
    """Test verbosity levels."""

    @pytest.fixture(autouse=True)
    def restore_level(self):
        yield
        log.set_level(0)

    def test_levels(self) -> None:
        """Test that verbose and debug lines follow the level."""
        stream = io.StringIO()
        logger = log.get_logger("ironsmith:test")

        log.set_level(0, sink=stream)
        logger.info("normal line")
        logger.log(log.VERBOSE, "verbose line")
        logger.debug("debug line")

        log.set_level(1, sink=stream)
        logger.log(log.VERBOSE, "second verbose line")
        logger.debug("second debug line")

        log.set_level(2, sink=stream)
        logger.debug("third debug line")

        output = stream.getvalue()
        assert "normal line" in output
        assert "verbose line" not in output.split("second")[0]
        assert "debug line" not in output.split("third")[0]
        assert "second verbose line" in output
        assert "third debug line" in output
        assert "ironsmith:test" in output
        assert log.get_level() == 2

    def test_boolean_level(self) -> None:
        """Test that True means verbose."""
        log.set_level(True, sink=io.StringIO())

        assert log.get_level() == 1

    def test_invalid_level(self) -> None:
        """Test that levels outside 0..2 are refused."""
        with pytest.raises(ValueError, match="must be one of 0, 1, 2"):
            log.set_level(3)
