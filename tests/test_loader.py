"""
Tests for the workflow definition loader and catalog store.
"""

import pytest

from exportflow.core.preferences import PreferenceStore
from exportflow.exceptions import ConfigError
from exportflow.models.catalog import BuiltinKind, StepKind
from exportflow.workflows.loader import CatalogStore, DefinitionLoader


class TestDefinitionLoader:
    """Tests for parsing definition files."""

    def test_sections_in_file_order(self, catalog):
        """Test that steps, workflows and papers keep file order."""
        assert list(catalog.steps) == ["SE", "GR", "OS", "EXIF", "SIZE", "PPI"]
        assert catalog.workflow_names == ["MyWorkflow", "Print"]
        assert catalog.paper_names == ["A4", "A3"]

    def test_workflow_codes_trimmed(self, catalog):
        """Test that whitespace around step codes is removed."""
        assert catalog.get_workflow("Print").steps == ("SIZE", "SE", "EXIF", "PPI", "CI")
        assert catalog.get_workflow("MyWorkflow").steps == ("SE", "GR", "OS")

    def test_step_fields(self, catalog):
        """Test code, display name and template of a parsed step."""
        step = catalog.steps["GR"]
        assert step.name == "Grain"
        assert step.command_template == "grain-tool -o %s -g %d %s"
        assert step.kind == StepKind.BUILTIN
        assert step.builtin == BuiltinKind.GRAIN

        generic = catalog.steps["SE"]
        assert generic.kind == StepKind.GENERIC
        assert generic.builtin is None

    def test_paper_width(self, catalog):
        """Test paper widths are parsed as millimetres."""
        assert catalog.get_paper("A4").width_mm == 210
        assert catalog.get_paper("A3").width_mm == 297

    def test_load_is_idempotent(self, definitions_file):
        """Test that loading the same file twice gives equal catalogs."""
        loader = DefinitionLoader()
        assert loader.load_file(definitions_file) == loader.load_file(definitions_file)

    def test_section_headers_case_insensitive(self):
        """Test that [STEPS] and [Workflows] are recognised."""
        catalog = DefinitionLoader().load_from_string(
            "[STEPS]\nSE:Silver=silver %s\n[Workflows]\nW1:SE\n[PAPERS]\nA4:210\n"
        )
        assert "SE" in catalog.steps
        assert "W1" in catalog.workflows
        assert "A4" in catalog.papers

    def test_template_may_contain_equals(self):
        """Test that only the first '=' separates the template."""
        catalog = DefinitionLoader().load_from_string(
            "[steps]\nOS:Sharpener=sharpen --mode=print %s\n"
        )
        assert catalog.steps["OS"].command_template == "sharpen --mode=print %s"

    def test_step_without_display_name(self):
        """Test that the display name defaults to the code."""
        catalog = DefinitionLoader().load_from_string("[steps]\nOS=sharpen %s\n")
        assert catalog.steps["OS"].name == "OS"

    def test_comments_and_short_lines_skipped(self):
        """Test that comments and lines of two characters or less are ignored."""
        catalog = DefinitionLoader().load_from_string(
            "# my workflows\n[workflows]\n; old: W0:SE\nab\n\nW1:SE,OS\n"
        )
        assert catalog.workflow_names == ["W1"]

    def test_malformed_lines_skipped(self):
        """Test that malformed lines are skipped and the rest still loads."""
        catalog = DefinitionLoader().load_from_string(
            "[steps]\nno template here\nSE:Silver=silver %s\n"
            "[workflows]\nmissing colon\nW1:SE\n"
            "[papers]\nA4:wide\nA5:0\nA3:297\n"
        )
        assert list(catalog.steps) == ["SE"]
        assert catalog.workflow_names == ["W1"]
        assert catalog.paper_names == ["A3"]

    def test_duplicate_name_last_wins(self):
        """Test that a repeated entry replaces the earlier one."""
        catalog = DefinitionLoader().load_from_string(
            "[papers]\nA4:200\nA3:297\nA4:210\n"
        )
        assert catalog.paper_names == ["A4", "A3"]
        assert catalog.get_paper("A4").width_mm == 210

    def test_workflows_beyond_maximum_ignored(self):
        """Test that only the first max_workflows workflows are kept."""
        catalog = DefinitionLoader(max_workflows=3).load_from_string(
            "[workflows]\nW1:SE\nW2:SE\nW3:SE\nW4:SE\n"
        )
        assert catalog.workflow_names == ["W1", "W2", "W3"]

    def test_lines_before_first_section_ignored(self):
        """Test that entries outside any section are ignored."""
        catalog = DefinitionLoader().load_from_string("A4:210\n[papers]\nA3:297\n")
        assert catalog.paper_names == ["A3"]

    def test_no_section_raises(self):
        """Test that content without any section header is rejected."""
        with pytest.raises(ConfigError):
            DefinitionLoader().load_from_string("SE:Silver=silver %s\n")

    def test_missing_file_raises(self, tmp_path):
        """Test that a missing file raises ConfigError with its path."""
        path = tmp_path / "missing.txt"
        with pytest.raises(ConfigError) as exc_info:
            DefinitionLoader().load_file(path)
        assert exc_info.value.path == str(path)


class TestCatalogStore:
    """Tests for the catalog store."""

    def test_starts_empty(self):
        """Test that a new store holds an empty catalog."""
        assert CatalogStore().catalog.is_empty

    def test_reload_installs_catalog(self, definitions_file):
        """Test that reload replaces the current catalog."""
        store = CatalogStore()
        catalog = store.reload(definitions_file)
        assert store.catalog is catalog
        assert catalog.source == str(definitions_file)

    def test_reload_keeps_old_object_unchanged(self, definitions_file, tmp_path):
        """Test that a reload does not mutate the previous catalog."""
        store = CatalogStore()
        first = store.reload(definitions_file)

        other = tmp_path / "other.txt"
        other.write_text("[workflows]\nOnly:SE\n", encoding="utf-8")
        second = store.reload(other)

        assert first.workflow_names == ["MyWorkflow", "Print"]
        assert second.workflow_names == ["Only"]
        assert store.catalog is second

    def test_failed_reload_leaves_empty_catalog(self, definitions_file, tmp_path):
        """Test that a failed reload clears the previous catalog."""
        store = CatalogStore()
        store.reload(definitions_file)

        with pytest.raises(ConfigError):
            store.reload(tmp_path / "missing.txt")

        assert store.catalog.is_empty
        assert store.catalog.workflow_names == []

    def test_reload_clamps_selection(self, tmp_path):
        """Test that a selection beyond the new workflow count is clamped."""
        preferences = PreferenceStore(tmp_path / "data")
        preferences.select(workflow_choice=3, paper_choice=0)

        path = tmp_path / "workflows.txt"
        path.write_text("[workflows]\nOnly:SE\n[papers]\nA4:210\nA3:297\n", encoding="utf-8")
        store = CatalogStore(preferences=preferences)
        store.reload(path)

        assert store.selection.workflow_choice == 1
        assert store.selection.paper_choice == 1
        assert store.selected_workflow().name == "Only"
        assert store.selected_paper().name == "A4"

    def test_selection_without_preferences(self, definitions_file):
        """Test that a store without preferences selects nothing."""
        store = CatalogStore()
        store.reload(definitions_file)
        assert store.selection.workflow_choice == 0
        assert store.selected_workflow() is None
