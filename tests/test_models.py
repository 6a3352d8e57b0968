"""
Tests for catalog and run models.
"""

from pathlib import Path

import pytest

from exportflow.exceptions import RunStateError, UnknownStepError
from exportflow.models.catalog import (
    BuiltinKind,
    PaperProfile,
    StepKind,
    StepTemplate,
    WorkflowCatalog,
    WorkflowDefinition,
)
from exportflow.models.run import PipelineRun, RunState, StepResult


class TestBuiltinKind:
    """Tests for built-in step dispatch."""

    def test_exact_match(self):
        """Test that built-in codes match exactly."""
        assert BuiltinKind.from_code("GR") == BuiltinKind.GRAIN
        assert BuiltinKind.from_code("CI") == BuiltinKind.COLLECTION_IMPORT
        assert BuiltinKind.from_code("SIZE") == BuiltinKind.SIZE

    def test_no_prefix_match(self):
        """Test that codes sharing a prefix are not built-ins."""
        assert BuiltinKind.from_code("GRX") is None
        assert BuiltinKind.from_code("gr") is None
        assert BuiltinKind.from_code("SIZES") is None

    def test_only_ci_needs_no_template(self):
        """Test which built-ins need a command template."""
        assert not BuiltinKind.COLLECTION_IMPORT.needs_template
        assert all(kind.needs_template for kind in BuiltinKind if kind is not BuiltinKind.COLLECTION_IMPORT)


class TestStepTemplate:
    """Tests for StepTemplate."""

    def test_create_builtin(self):
        """Test tagging of a built-in step."""
        step = StepTemplate.create("EXIF", "ExifTransfer", "exiftool -TagsFromFile %s %s")
        assert step.is_builtin
        assert step.builtin == BuiltinKind.EXIF

    def test_create_generic(self):
        """Test tagging of a generic step."""
        step = StepTemplate.create("SE", "Silver Efex", "silver %s")
        assert step.kind == StepKind.GENERIC
        assert not step.is_builtin


class TestWorkflowCatalog:
    """Tests for WorkflowCatalog."""

    @pytest.fixture
    def small_catalog(self):
        return WorkflowCatalog(
            steps={"SE": StepTemplate.create("SE", "Silver", "silver %s")},
            workflows={
                "W1": WorkflowDefinition(name="W1", steps=("SE", "CI")),
                "W2": WorkflowDefinition(name="W2", steps=("SE",)),
            },
            papers={"A4": PaperProfile(name="A4", width_mm=210)},
        )

    def test_resolve_defined_step(self, small_catalog):
        """Test that defined steps resolve to their template."""
        assert small_catalog.resolve_step("SE").command_template == "silver %s"

    def test_resolve_collection_import(self, small_catalog):
        """Test that CI resolves without a definition."""
        step = small_catalog.resolve_step("CI")
        assert step.builtin == BuiltinKind.COLLECTION_IMPORT
        assert step.command_template == ""

    def test_resolve_unknown(self, small_catalog):
        """Test that unknown codes raise UnknownStepError."""
        with pytest.raises(UnknownStepError, match="Unknown workflow step: Z"):
            small_catalog.resolve_step("Z")

    def test_resolve_builtin_without_template(self, small_catalog):
        """Test that built-ins other than CI need a definition."""
        with pytest.raises(UnknownStepError) as exc_info:
            small_catalog.resolve_step("GR")
        assert exc_info.value.step == "GR"

    def test_selection_index(self, small_catalog):
        """Test 1-based lookups by selection index."""
        assert small_catalog.workflow_at(2).name == "W2"
        assert small_catalog.workflow_at(0) is None
        assert small_catalog.workflow_at(3) is None
        assert small_catalog.paper_at(1).name == "A4"

    def test_workflow_helpers(self, small_catalog):
        """Test workflow description and built-in detection."""
        workflow = small_catalog.get_workflow("W1")
        assert workflow.has_collection_import
        assert workflow.describe() == "SE,CI"
        assert not small_catalog.get_workflow("W2").has_collection_import

    def test_empty(self):
        """Test the empty catalog."""
        assert WorkflowCatalog.empty().is_empty

    def test_paper_width_must_be_positive(self):
        """Test that a zero paper width is rejected."""
        with pytest.raises(ValueError):
            PaperProfile(name="Zero", width_mm=0)


class TestPipelineRun:
    """Tests for the run state machine."""

    @pytest.fixture
    def run(self):
        return PipelineRun(workflow="W", steps=("A", "B"), file_path=Path("/tmp/export/a.tif"))

    def test_initial_state(self, run):
        """Test that a new run is pending."""
        assert run.state == RunState.PENDING
        assert run.current_step is None
        assert len(run.id) == 8

    def test_success_path(self, run):
        """Test PENDING -> RUNNING -> SUCCEEDED."""
        run.start()
        run.begin_step(0)
        run.record(StepResult(step="A", index=0, command="a"))
        run.begin_step(1)
        assert run.current_step == "B"
        run.succeed()

        assert run.state == RunState.SUCCEEDED
        assert run.success
        assert run.completed_at is not None

    def test_failure_records_step(self, run):
        """Test that failing records the running step."""
        run.start()
        run.begin_step(1)
        run.fail("boom", exit_code=3)

        assert run.state == RunState.FAILED
        assert run.failed_step == "B"
        assert run.exit_code == 3
        assert "at step B" in run.get_summary()

    def test_fail_from_pending(self, run):
        """Test that a run can fail before it starts."""
        run.fail("no such file")
        assert run.state == RunState.FAILED
        assert run.failed_step is None

    def test_illegal_transitions(self, run):
        """Test that out-of-order transitions raise RunStateError."""
        with pytest.raises(RunStateError):
            run.succeed()
        with pytest.raises(RunStateError):
            run.begin_step(0)

        run.start()
        with pytest.raises(RunStateError):
            run.start()
        with pytest.raises(RunStateError):
            run.begin_step(2)

        run.succeed()
        with pytest.raises(RunStateError):
            run.fail("late")

    def test_step_result_summary(self):
        """Test step result summaries."""
        assert StepResult(step="A", index=0, skipped=True).get_summary() == "[SKIPPED] A"
        assert StepResult(step="A", index=0, exit_code=1).get_summary() == "[FAILED (1)] A (0.0s)"
        assert StepResult(step="A", index=0, duration=1.5).get_summary() == "[SUCCESS] A (1.5s)"
