"""
Print resolution helpers.

PPI is derived from the longer image side and the target print width:
``round_half_up(max(width, height) / (width_mm / 25.4))``.
"""

from __future__ import annotations

import re
from pathlib import Path

from exportflow.exceptions import WorkingFileError
from exportflow.utils.helpers import round_half_up

MM_PER_INCH = 25.4

DIMENSIONS_PATTERN = re.compile(r"(\d+)\s*x\s*(\d+)")

# ">" or ">>" not preceded by a descriptor number or "&" and not followed by "&"
STDOUT_REDIRECT_PATTERN = re.compile(r"(?<![\d&>])>>?(?!&)\s*(\"[^\"]+\"|'[^']+'|[^\s;|&]+)")


def parse_dimensions(text: str) -> tuple[int, int]:
    """
    Parse a ``WIDTHxHEIGHT`` string.

    Args:
        text: Text containing the dimensions (e.g. "4000x3000")

    Returns:
        Tuple of (width, height) in pixels

    Raises:
        ValueError: If no dimensions are found
    """
    match = DIMENSIONS_PATTERN.search(text)
    if not match:
        raise ValueError(f"No WIDTHxHEIGHT dimensions in {text!r}")
    return int(match.group(1)), int(match.group(2))


def parse_identify_output(output: str) -> tuple[int, int]:
    """
    Get image dimensions from ImageMagick ``identify`` output.

    ``identify photo.jpg`` prints ``photo.jpg JPEG 4000x3000 4000x3000+0+0 ...``;
    the third token holds the dimensions.

    Args:
        output: Raw identify output

    Returns:
        Tuple of (width, height) in pixels
    """
    tokens = output.split()
    if len(tokens) < 3:
        raise ValueError(f"Unexpected identify output: {output!r}")
    return parse_dimensions(tokens[2])


def read_dimensions_file(path: str | Path) -> tuple[int, int]:
    """
    Read dimensions written by a size probe into a side-channel file.

    The last line holding ``WIDTHxHEIGHT`` wins.

    Raises:
        WorkingFileError: If the file cannot be read or holds no dimensions
    """
    path = Path(path)
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        raise WorkingFileError(f"Cannot read size file {path}: {e}", path=str(path)) from e

    dimensions = None
    for line in lines:
        try:
            dimensions = parse_dimensions(line)
        except ValueError:
            continue
    if dimensions is None:
        raise WorkingFileError(f"No WIDTHxHEIGHT dimensions in {path}", path=str(path))
    return dimensions


def compute_ppi(width: int, height: int, width_mm: float) -> int:
    """
    Compute the PPI needed to print the longer side at ``width_mm``.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        width_mm: Target print width in millimetres

    Returns:
        Pixels per inch, rounded half up

    Example:
        >>> compute_ppi(4000, 3000, 210)
        484
    """
    if width_mm <= 0:
        raise ValueError("Paper width must be positive")
    return round_half_up(max(width, height) / (width_mm / MM_PER_INCH))


def print_size_mm(width: int, height: int, ppi: float) -> tuple[float, float]:
    """
    Compute the printed size of an image at a given PPI.

    Returns:
        Tuple of (width, height) in millimetres, rounded to 2 decimals
    """
    if ppi <= 0:
        raise ValueError("PPI must be positive")
    return (
        round(MM_PER_INCH * width / ppi, 2),
        round(MM_PER_INCH * height / ppi, 2),
    )


def redirect_target(command: str) -> Path | None:
    """
    Get the file a command redirects its standard output into.

    ``identify -format "%wx%h" a.tif > /tmp/size.txt 2>/dev/null`` writes the
    dimensions into ``/tmp/size.txt``. Redirects of other descriptors
    (``2>``, ``2>&1``, ``&>``) and duplications (``>&2``) are ignored; the
    first stdout redirect wins.

    Returns:
        Redirect target, or None if the command has no stdout redirect
    """
    match = STDOUT_REDIRECT_PATTERN.search(command)
    if not match:
        return None
    target = match.group(1).strip("'\"")
    return Path(target) if target else None
