"""
Workflow catalog models.

A catalog is the parsed content of one workflow definition file: the step
templates, the named workflows and the paper profiles. It is replaced as a
whole on every reload and never mutated afterwards.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from exportflow.exceptions import UnknownPaperError, UnknownStepError, UnknownWorkflowError


class StepKind(str, Enum):
    """How a step is executed."""

    GENERIC = "generic"
    BUILTIN = "builtin"


class BuiltinKind(str, Enum):
    """Step codes handled specially by the executor."""

    COLLECTION_IMPORT = "CI"
    SIZE = "SIZE"
    PPI = "PPI"
    EXIF = "EXIF"
    GRAIN = "GR"

    @property
    def description(self) -> str:
        """Get description for the built-in step."""
        descriptions = {
            "CI": "Import the result into the collection",
            "SIZE": "Determine export size and compute PPI for the paper",
            "PPI": "Write the computed PPI into the file",
            "EXIF": "Transfer EXIF data from the source image",
            "GR": "Add grain through a temporary output file",
        }
        return descriptions[self.value]

    @property
    def needs_template(self) -> bool:
        """Whether the step needs a command template from the definition file."""
        return self is not BuiltinKind.COLLECTION_IMPORT

    @classmethod
    def from_code(cls, code: str) -> BuiltinKind | None:
        """Exact-match lookup of a step code; no prefix matching."""
        for kind in cls:
            if kind.value == code:
                return kind
        return None


class StepTemplate(BaseModel):
    """A single step definition from the ``[steps]`` section."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(description="Short step code, e.g. GR or EXIF")
    name: str = Field(default="", description="Display name")
    command_template: str = Field(default="", description="Command line with positional placeholders")
    kind: StepKind = Field(default=StepKind.GENERIC, description="Generic or built-in step")
    builtin: BuiltinKind | None = Field(default=None, description="Built-in kind for built-in steps")

    @classmethod
    def create(cls, code: str, name: str = "", command_template: str = "") -> StepTemplate:
        """Create a template, tagging it as built-in when the code matches exactly."""
        builtin = BuiltinKind.from_code(code)
        return cls(
            code=code,
            name=name or code,
            command_template=command_template,
            kind=StepKind.BUILTIN if builtin else StepKind.GENERIC,
            builtin=builtin,
        )

    @property
    def is_builtin(self) -> bool:
        return self.kind == StepKind.BUILTIN


class WorkflowDefinition(BaseModel):
    """A named, ordered sequence of step codes."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Workflow name")
    steps: tuple[str, ...] = Field(default=(), description="Ordered step codes")

    def uses(self, kind: BuiltinKind) -> bool:
        """Check whether the workflow contains a built-in step."""
        return kind.value in self.steps

    @property
    def has_collection_import(self) -> bool:
        return self.uses(BuiltinKind.COLLECTION_IMPORT)

    def describe(self) -> str:
        """Get the step list as written in the definition file."""
        return ",".join(self.steps)


class PaperProfile(BaseModel):
    """A paper format used to compute print resolution."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Paper name")
    width_mm: float = Field(gt=0, description="Target print width in millimetres")


class WorkflowCatalog(BaseModel):
    """
    Parsed workflow definitions.

    Example:
        >>> catalog = DefinitionLoader().load_file("workflows.txt")
        >>> workflow = catalog.get_workflow("Print")
        >>> [catalog.resolve_step(code).code for code in workflow.steps]
    """

    model_config = ConfigDict(frozen=True)

    source: str | None = Field(default=None, description="Definition file the catalog was loaded from")
    steps: dict[str, StepTemplate] = Field(default_factory=dict)
    workflows: dict[str, WorkflowDefinition] = Field(default_factory=dict)
    papers: dict[str, PaperProfile] = Field(default_factory=dict)

    @classmethod
    def empty(cls, source: str | None = None) -> WorkflowCatalog:
        """Get a catalog with no entries."""
        return cls(source=source)

    @property
    def is_empty(self) -> bool:
        return not (self.steps or self.workflows or self.papers)

    @property
    def workflow_names(self) -> list[str]:
        return list(self.workflows)

    @property
    def paper_names(self) -> list[str]:
        return list(self.papers)

    def get_workflow(self, name: str) -> WorkflowDefinition:
        """
        Get a workflow by name.

        Raises:
            UnknownWorkflowError: If the workflow is not defined
        """
        try:
            return self.workflows[name]
        except KeyError:
            raise UnknownWorkflowError(name) from None

    def get_paper(self, name: str) -> PaperProfile:
        """
        Get a paper profile by name.

        Raises:
            UnknownPaperError: If the paper is not defined
        """
        try:
            return self.papers[name]
        except KeyError:
            raise UnknownPaperError(name) from None

    def workflow_at(self, choice: int) -> WorkflowDefinition | None:
        """Get a workflow by 1-based selection index."""
        names = self.workflow_names
        if 1 <= choice <= len(names):
            return self.workflows[names[choice - 1]]
        return None

    def paper_at(self, choice: int) -> PaperProfile | None:
        """Get a paper profile by 1-based selection index."""
        names = self.paper_names
        if 1 <= choice <= len(names):
            return self.papers[names[choice - 1]]
        return None

    def resolve_step(self, code: str) -> StepTemplate:
        """
        Resolve a step code to its template.

        Collection import needs no command template, every other step
        (built-in or not) must be defined in the ``[steps]`` section.

        Raises:
            UnknownStepError: If the code cannot be resolved
        """
        template = self.steps.get(code)
        if template is not None:
            return template

        builtin = BuiltinKind.from_code(code)
        if builtin is None:
            raise UnknownStepError(code)
        if builtin.needs_template:
            raise UnknownStepError(code, f"Built-in step '{code}' has no command template")
        return StepTemplate.create(code, builtin.description)
