"""Tests for buildlog.content — build_log_content."""

from datetime import datetime

from buildlog.content import build_log_content
from buildlog.types import Build

from conftest import make_build

FIXED = datetime(2024, 5, 1, 12, 30, 0)


class TestBuildLogContent:

    def test_header_and_identity(self):
        text = build_log_content(make_build(), FIXED)
        assert text.startswith("Minecraft Build Log\n")
        assert "Generated: 2024-05-01T12:30:00" in text
        assert "Build ID: 1" in text
        assert "Build Name: Castle" in text
        assert text.rstrip().endswith("End of Log")

    def test_related_entities_sorted_by_name(self):
        text = build_log_content(make_build(), FIXED)
        assert text.index("Name: Alex") < text.index("Name: Steve")
        assert text.index("Name: Brown") < text.index("Name: Gray")
        assert "  - ID: 1, Name: Medieval" in text

    def test_screenshots_sorted(self):
        text = build_log_content(make_build(), FIXED)
        assert text.index("castle1.png") < text.index("castle2.png")

    def test_schematic_size(self):
        assert "  Size: 4 bytes" in build_log_content(make_build(), FIXED)

    def test_empty_sections(self):
        text = build_log_content(Build(id=9, name="Bare"), FIXED)
        assert text.count("  (None)") == 5
        assert "  (Not present)" in text

    def test_blank_description_is_none(self):
        build = Build(id=9, name="Bare", description="   ")
        text = build_log_content(build, FIXED)
        assert "Description:\n  (None)" in text

    def test_deterministic_for_fixed_time(self):
        assert build_log_content(make_build(), FIXED) == build_log_content(make_build(), FIXED)
