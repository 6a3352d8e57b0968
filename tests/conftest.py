"""
Test configuration and fixtures.
"""

from pathlib import Path

import pytest

from exportflow.tools.runner import CommandResult
from exportflow.workflows.loader import DefinitionLoader


SAMPLE_DEFINITIONS = """\
[steps]
SE:Silver Efex=wine silver-efex %s
GR:Grain=grain-tool -o %s -g %d %s
OS:Output Sharpener=wine sharpener %s
EXIF:ExifTransfer=exiftool -TagsFromFile %s %s
SIZE:Size=identify -format %%wx%%h %s
PPI:SetPPI=convert %s -density %dx%d %s

[workflows]
MyWorkflow:SE,GR,OS
Print: SIZE, SE , EXIF, PPI ,CI

[papers]
A4:210
A3:297
"""


class FakeRunner:
    """
    Process runner that records commands instead of running them.

    Exit codes and side effects are keyed by the command's first word.
    """

    def __init__(self, exit_codes=None, effects=None, outputs=None):
        self.exit_codes = exit_codes or {}
        self.effects = effects or {}
        self.outputs = outputs or {}
        self.commands: list[str] = []

    def run(self, command: str) -> CommandResult:
        self.commands.append(command)
        program = command.split()[0]
        if program in self.effects:
            self.effects[program](command)
        return CommandResult(
            command=command,
            exit_code=self.exit_codes.get(program, 0),
            output=self.outputs.get(program, ""),
        )

    @property
    def programs(self) -> list[str]:
        return [command.split()[0] for command in self.commands]


class FakeImage:
    """Host image handle with metadata attributes."""

    def __init__(self, path, filename, **metadata):
        self.path = str(path)
        self.filename = filename
        self.group_leader = None
        self.title = ""
        self.rating = 0
        self.red = False
        for key, value in metadata.items():
            setattr(self, key, value)


class FakeHost:
    """Host library recording imports, grouping and tagging."""

    def __init__(self):
        self.tags: dict[int, list[str]] = {}
        self.imported: list[FakeImage] = []
        self.groups: list[tuple[FakeImage, FakeImage]] = []

    def import_file(self, path):
        p = Path(path)
        image = FakeImage(p.parent, p.name)
        self.tags[id(image)] = ["darktable|format|tif"]
        self.imported.append(image)
        return image

    def group_with(self, image, leader):
        self.groups.append((image, leader))

    def get_tags(self, image):
        return list(self.tags.get(id(image), []))

    def attach_tag(self, tag, image):
        self.tags.setdefault(id(image), []).append(tag)

    def detach_tag(self, tag, image):
        self.tags[id(image)].remove(tag)


@pytest.fixture
def sample_definitions():
    """Sample definition file content."""
    return SAMPLE_DEFINITIONS


@pytest.fixture
def definitions_file(tmp_path):
    """Sample definition file on disk."""
    path = tmp_path / "workflows.txt"
    path.write_text(SAMPLE_DEFINITIONS, encoding="utf-8")
    return path


@pytest.fixture
def catalog(definitions_file):
    """Catalog loaded from the sample definition file."""
    return DefinitionLoader().load_file(definitions_file)


@pytest.fixture
def exported_file(tmp_path):
    """An exported image waiting for its workflow."""
    export_dir = tmp_path / "export"
    export_dir.mkdir()
    path = export_dir / "IMG_0001.tif"
    path.write_bytes(b"II*\x00fake tiff")
    return path


@pytest.fixture
def fake_runner():
    """Runner where every command succeeds."""
    return FakeRunner()


@pytest.fixture
def fake_host():
    """Host library double."""
    return FakeHost()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Isolated data directory for the preference database."""
    path = tmp_path / "data"
    monkeypatch.setenv("EXPORTFLOW_OUTPUT__DATA_DIR", str(path))
    return path


@pytest.fixture
def make_runner():
    """Factory for runners with exit codes, outputs and side effects."""
    return FakeRunner


@pytest.fixture
def make_image():
    """Factory for host image handles."""
    return FakeImage
