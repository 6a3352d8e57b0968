"""
Tests for helper utilities.
"""

import pytest

from exportflow.exceptions import ConfigError
from exportflow.utils.helpers import (
    count_placeholders,
    create_unique_filename,
    format_duration,
    format_template,
    increment_filename,
    round_half_up,
    sanitize_filename,
    split_codes,
)


class TestFormatTemplate:
    """Tests for command template rendering."""

    def test_counts_placeholders(self):
        assert count_placeholders("convert %s -density %dx%d %s") == 4
        assert count_placeholders('identify -format "%%wx%%h" %s') == 1
        assert count_placeholders("echo done") == 0

    def test_uses_leading_args_only(self):
        """Test that extra arguments are ignored."""
        assert format_template("silver %s", ("/tmp/a.tif", 300, 300)) == "silver /tmp/a.tif"

    def test_integer_placeholders(self):
        assert format_template("convert %s -density %ix%i", ("a.tif", 484, 484)) == (
            "convert a.tif -density 484x484"
        )

    def test_literal_percent(self):
        assert format_template("identify -format %%wx%%h %s", ("a.tif",)) == "identify -format %wx%h a.tif"

    def test_too_few_args(self):
        with pytest.raises(ConfigError, match="step 'EXIF'"):
            format_template("exiftool %s %s %s", ("a", "b"), step="EXIF")

    def test_wrong_type(self):
        with pytest.raises(ConfigError):
            format_template("convert -density %d", ("not a number",))


class TestSplitCodes:
    """Tests for step list parsing."""

    def test_trims_and_drops_empty(self):
        assert split_codes(" SE , GR,,OS ") == ("SE", "GR", "OS")

    def test_empty(self):
        assert split_codes("") == ()


class TestRoundHalfUp:
    """Tests for rounding."""

    def test_rounds_half_up(self):
        assert round_half_up(483.5) == 484
        assert round_half_up(484.5) == 485
        assert round_half_up(483.49) == 483


class TestSanitizeFilename:
    """Tests for filename sanitization."""

    def test_removes_invalid_chars(self):
        assert sanitize_filename("file<>:name") == "file_name"
        assert sanitize_filename("path/to\\file") == "path_to_file"

    def test_handles_empty(self):
        assert sanitize_filename("") == "unnamed"
        assert sanitize_filename("...") == "unnamed"

    def test_truncates_long_names(self):
        long_name = "a" * 300 + ".tif"
        result = sanitize_filename(long_name, max_length=100)
        assert len(result) <= 100
        assert result.endswith(".tif")


class TestUniqueFilename:
    """Tests for numbered filenames."""

    def test_increment(self, tmp_path):
        assert increment_filename(tmp_path / "photo.tif").name == "photo_01.tif"
        assert increment_filename(tmp_path / "photo_01.tif").name == "photo_02.tif"
        assert increment_filename(tmp_path / "photo_09.tif").name == "photo_10.tif"

    def test_free_name_unchanged(self, tmp_path):
        assert create_unique_filename(tmp_path / "photo.tif") == tmp_path / "photo.tif"

    def test_skips_taken_names(self, tmp_path):
        (tmp_path / "photo.tif").touch()
        (tmp_path / "photo_01.tif").touch()
        assert create_unique_filename(tmp_path / "photo.tif") == tmp_path / "photo_02.tif"

    def test_gives_up_after_99(self, tmp_path):
        (tmp_path / "photo_99.tif").touch()
        with pytest.raises(FileExistsError):
            create_unique_filename(tmp_path / "photo_99.tif")


class TestFormatDuration:
    """Tests for duration formatting."""

    def test_seconds(self):
        assert format_duration(30) == "30s"
        assert format_duration(0) == "0s"

    def test_minutes(self):
        assert format_duration(90) == "1m 30s"
        assert format_duration(120) == "2m"

    def test_hours(self):
        assert format_duration(3600) == "1h"
        assert format_duration(3665) == "1h 1m 5s"
