"""
Delivery of finished workflow output.

A run whose workflow contains the CI step goes back into the host's
collection next to the original image, grouped with it and carrying its
tags and metadata. Every other run is copied into the output folder.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Iterable, Protocol

from exportflow.exceptions import ConfigError, MissingParameterError, WorkingFileError
from exportflow.models.catalog import BuiltinKind
from exportflow.models.run import PipelineRun
from exportflow.utils.helpers import create_unique_filename, sanitize_filename
from exportflow.utils.logger import get_logger

logger = get_logger(__name__)

METADATA_FIELDS = (
    "publisher",
    "title",
    "creator",
    "rights",
    "description",
    "notes",
    "rating",
    "red",
    "blue",
    "green",
    "yellow",
    "purple",
)

SYSTEM_TAG_PREFIX = "darktable|"


class ImageHandle(Protocol):
    """An image known to the host application."""

    path: str
    filename: str


class HostLibrary(Protocol):
    """The host application's import, grouping and tagging interface."""

    def import_file(self, path: str) -> Any:
        ...

    def group_with(self, image: Any, leader: Any) -> None:
        ...

    def get_tags(self, image: Any) -> Iterable[Any]:
        ...

    def attach_tag(self, tag: Any, image: Any) -> None:
        ...

    def detach_tag(self, tag: Any, image: Any) -> None:
        ...


def tag_name(tag: Any) -> str:
    """Get the name of a tag object or plain string tag."""
    return str(getattr(tag, "name", tag))


class ExportDelivery:
    """
    Moves finished files to their destination.

    Example:
        >>> delivery = ExportDelivery(host=library, output_folder="/prints")
        >>> delivery.deliver(run, image)
        PosixPath('/photos/2024/IMG_0001_01.tif')
    """

    def __init__(
        self,
        host: HostLibrary | None = None,
        output_folder: str | Path | None = None,
    ):
        """
        Initialize the delivery.

        Args:
            host: Host library used for collection import (optional)
            output_folder: Destination for runs without collection import
        """
        self.host = host
        self.output_folder = Path(output_folder).expanduser() if output_folder else None

    def deliver(self, run: PipelineRun, image: ImageHandle | None = None) -> Path:
        """
        Deliver the output of a succeeded run.

        Args:
            run: Finished pipeline run
            image: Host image the file was exported from

        Returns:
            Final location of the file
        """
        if run.collection_import:
            return self.import_into_collection(run, image)
        return self.copy_to_folder(run.file_path)

    def import_into_collection(self, run: PipelineRun, image: ImageHandle | None = None) -> Path:
        """
        Copy the file next to its original and import it into the host.

        Without a host library the file is only copied.

        Raises:
            MissingParameterError: If neither an image nor a source path is known
            WorkingFileError: If the copy fails
        """
        if image is not None:
            directory = Path(image.path)
        elif run.source_path is not None:
            directory = run.source_path.parent
        else:
            raise MissingParameterError(BuiltinKind.COLLECTION_IMPORT.value, "the source image")

        try:
            target = create_unique_filename(directory / run.file_path.name)
        except FileExistsError as e:
            raise WorkingFileError(str(e), path=str(directory)) from e
        self._copy(run.file_path, target)

        if self.host is None or image is None:
            logger.warning(f"No host library available, {target.name} was copied but not imported")
            return target

        new_image = self.host.import_file(str(target))
        self.host.group_with(new_image, getattr(image, "group_leader", None) or image)

        for tag in list(self.host.get_tags(new_image)):
            self.host.detach_tag(tag, new_image)
        for tag in list(self.host.get_tags(image)):
            if not tag_name(tag).startswith(SYSTEM_TAG_PREFIX):
                self.host.attach_tag(tag, new_image)

        for field in METADATA_FIELDS:
            if hasattr(image, field):
                setattr(new_image, field, getattr(image, field))

        logger.info(f"Imported [cyan]{target}[/] into the collection")
        return target

    def copy_to_folder(self, exported: Path) -> Path:
        """
        Copy a file into the output folder, replacing an existing file.

        Raises:
            ConfigError: If no output folder is configured
            WorkingFileError: If the copy fails
        """
        if self.output_folder is None:
            raise ConfigError("No output folder configured")

        target = self.output_folder / sanitize_filename(exported.name)
        try:
            self.output_folder.mkdir(parents=True, exist_ok=True)
            target.unlink(missing_ok=True)
        except OSError as e:
            raise WorkingFileError(f"Cannot prepare {target}: {e}", path=str(target)) from e
        self._copy(exported, target)
        logger.info(f"Copied result to [cyan]{target}[/]")
        return target

    @staticmethod
    def _copy(source: Path, target: Path) -> None:
        try:
            shutil.copy2(source, target)
        except OSError as e:
            raise WorkingFileError(f"Error copying file {source}: {e}", path=str(source)) from e
