"""
Workflow definition loader for exportflow.

Parses definition files of the form::

    [steps]
    GR:Grain=grain-tool -o %s -g %s %s
    EXIF:ExifTransfer=exiftool -TagsFromFile %s %s

    [workflows]
    MyWorkflow:SE,GR,OS

    [papers]
    A4:210
"""

from __future__ import annotations

import threading
from pathlib import Path

from exportflow.core.preferences import PreferenceStore, SelectionState
from exportflow.exceptions import ConfigError
from exportflow.models.catalog import (
    PaperProfile,
    StepTemplate,
    WorkflowCatalog,
    WorkflowDefinition,
)
from exportflow.utils.helpers import split_codes
from exportflow.utils.logger import get_logger

logger = get_logger(__name__)

SECTION_STEPS = "steps"
SECTION_WORKFLOWS = "workflows"
SECTION_PAPERS = "papers"
COMMENT_PREFIXES = ("#", ";")


class DefinitionLoader:
    """
    Loads workflow catalogs from definition files.

    Example:
        >>> loader = DefinitionLoader()
        >>> catalog = loader.load_file("workflows.txt")
        >>> catalog.workflow_names
        ['MyWorkflow']
    """

    def __init__(self, max_workflows: int = 3):
        """
        Initialize the loader.

        Args:
            max_workflows: Workflows beyond this count are ignored
        """
        self.max_workflows = max_workflows

    def load_file(self, path: str | Path) -> WorkflowCatalog:
        """
        Load a catalog from a definition file.

        Args:
            path: Path to the definition file

        Returns:
            Loaded catalog

        Raises:
            ConfigError: If the file is missing, unreadable or has no sections
        """
        path = Path(path).expanduser()
        if not path.is_file():
            raise ConfigError(f"Workflows file could not be opened: {path}", path=str(path))

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Workflows file could not be read: {e}", path=str(path)) from e

        return self.load_from_string(content, source=str(path))

    def load_from_string(self, content: str, source: str | None = None) -> WorkflowCatalog:
        """
        Load a catalog from definition file content.

        Args:
            content: File content
            source: Where the content came from, for messages

        Returns:
            Loaded catalog

        Raises:
            ConfigError: If no section marker is present
        """
        steps: dict[str, StepTemplate] = {}
        workflows: dict[str, WorkflowDefinition] = {}
        papers: dict[str, PaperProfile] = {}

        section = ""
        found_section = False
        origin = source or "<string>"

        for number, raw in enumerate(content.splitlines(), start=1):
            line = raw.strip()

            if line.startswith("["):
                end = line.find("]")
                section = (line[1:end] if end > 0 else line[1:]).strip().lower()
                found_section = True
                continue

            if len(line) <= 2 or line.startswith(COMMENT_PREFIXES):
                continue

            if section == SECTION_STEPS:
                step = self._parse_step(line)
                if step is None:
                    logger.warning(f"{origin}:{number}: ignoring malformed step: {line}")
                    continue
                steps[step.code] = step

            elif section == SECTION_WORKFLOWS:
                workflow = self._parse_workflow(line)
                if workflow is None:
                    logger.warning(f"{origin}:{number}: ignoring malformed workflow: {line}")
                    continue
                if workflow.name not in workflows and len(workflows) >= self.max_workflows:
                    logger.warning(
                        f"{origin}:{number}: ignoring workflow '{workflow.name}', "
                        f"only {self.max_workflows} workflows are supported"
                    )
                    continue
                workflows[workflow.name] = workflow

            elif section == SECTION_PAPERS:
                paper = self._parse_paper(line)
                if paper is None:
                    logger.warning(f"{origin}:{number}: ignoring malformed paper: {line}")
                    continue
                papers[paper.name] = paper

        if not found_section:
            raise ConfigError(f"No [steps], [workflows] or [papers] section found in {origin}", path=source)

        logger.debug(
            f"Loaded {len(steps)} steps, {len(workflows)} workflows, {len(papers)} papers from {origin}"
        )
        return WorkflowCatalog(source=source, steps=steps, workflows=workflows, papers=papers)

    @staticmethod
    def _parse_step(line: str) -> StepTemplate | None:
        """Parse ``CODE:DisplayName=command template``."""
        head, sep, template = line.partition("=")
        if not sep:
            return None
        code, _, name = head.partition(":")
        code = code.strip()
        if not code:
            return None
        return StepTemplate.create(code, name.strip(), template.strip())

    @staticmethod
    def _parse_workflow(line: str) -> WorkflowDefinition | None:
        """Parse ``Name:CODE1,CODE2,...``."""
        name, sep, codes = line.partition(":")
        name = name.strip()
        if not sep or not name:
            return None
        return WorkflowDefinition(name=name, steps=split_codes(codes))

    @staticmethod
    def _parse_paper(line: str) -> PaperProfile | None:
        """Parse ``Name:width-in-millimetres``."""
        name, sep, width = line.partition(":")
        name = name.strip()
        if not sep or not name:
            return None
        try:
            width_mm = float(width.strip())
        except ValueError:
            return None
        if width_mm <= 0:
            return None
        return PaperProfile(name=name, width_mm=width_mm)


class CatalogStore:
    """
    Owns the current catalog and replaces it wholesale on reload.

    Runs receive the catalog object that was current when they started;
    a reload installs a new object and never mutates the old one.
    """

    def __init__(
        self,
        loader: DefinitionLoader | None = None,
        preferences: PreferenceStore | None = None,
    ):
        """
        Initialize the store with an empty catalog.

        Args:
            loader: Definition loader
            preferences: Preference storage for the persisted selection
        """
        self.loader = loader or DefinitionLoader()
        self.preferences = preferences
        self._catalog = WorkflowCatalog.empty()
        self._lock = threading.Lock()

    @property
    def catalog(self) -> WorkflowCatalog:
        """Get the current catalog."""
        with self._lock:
            return self._catalog

    def reload(self, path: str | Path) -> WorkflowCatalog:
        """
        Load a definition file and make it the current catalog.

        On failure an empty catalog is installed before the error is raised,
        so nothing from the previous file stays visible.

        Args:
            path: Definition file

        Returns:
            The new catalog

        Raises:
            ConfigError: If the file cannot be loaded
        """
        try:
            catalog = self.loader.load_file(path)
        except ConfigError as e:
            logger.error(e.message)
            self._install(WorkflowCatalog.empty(source=str(path)))
            raise

        self._install(catalog)
        if self.preferences is not None:
            self.preferences.clamp_selection(len(catalog.workflows), len(catalog.papers))
        logger.info(
            f"Loaded {len(catalog.workflows)} workflows and {len(catalog.papers)} papers from [cyan]{path}[/]"
        )
        return catalog

    def _install(self, catalog: WorkflowCatalog) -> None:
        with self._lock:
            self._catalog = catalog

    @property
    def selection(self) -> SelectionState:
        """Get the persisted selection (empty without preference storage)."""
        if self.preferences is None:
            return SelectionState()
        return self.preferences.selection

    def selected_workflow(self) -> WorkflowDefinition | None:
        """Get the workflow at the persisted selection index."""
        return self.catalog.workflow_at(self.selection.workflow_choice)

    def selected_paper(self) -> PaperProfile | None:
        """Get the paper at the persisted selection index."""
        return self.catalog.paper_at(self.selection.paper_choice)
