"""
Helper utilities for exportflow.

Provides general-purpose helper functions for:
- Command template formatting
- Step list parsing
- Filename handling
- Number formatting
"""

from __future__ import annotations

import math
import re
from datetime import timedelta
from pathlib import Path
from typing import Any, Sequence

from exportflow.exceptions import ConfigError

# printf-style placeholders accepted in command templates; "%%" is a literal
PLACEHOLDER_PATTERN = re.compile(r"%(?:%|[-+ #0]*\d*(?:\.\d+)?[sdifgx])")

INCREMENT_PATTERN = re.compile(r"^(?P<stem>.*)_(?P<number>\d{2})$")
MAX_INCREMENT = 99


def count_placeholders(template: str) -> int:
    """
    Count the positional placeholders in a command template.

    Args:
        template: Command template (e.g. "convert %s -density %d %s")

    Returns:
        Number of placeholders, not counting literal "%%"
    """
    return sum(1 for m in PLACEHOLDER_PATTERN.finditer(template) if m.group() != "%%")


def format_template(template: str, args: Sequence[Any], step: str | None = None) -> str:
    """
    Render a command template with positional arguments.

    Only as many leading arguments as the template has placeholders are
    used, so a template may ignore trailing arguments it does not need.

    Args:
        template: Command template
        args: Candidate arguments, in placeholder order
        step: Step code, for error messages

    Returns:
        Rendered command line

    Raises:
        ConfigError: If the template needs more arguments than given or
            a placeholder does not fit its argument
    """
    needed = count_placeholders(template)
    label = f"step '{step}'" if step else "command template"
    if needed > len(args):
        raise ConfigError(
            f"Template for {label} has {needed} placeholders but only {len(args)} values are available"
        )
    try:
        return template % tuple(args[:needed])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Cannot render template for {label}: {e}") from e


def split_codes(value: str) -> tuple[str, ...]:
    """
    Split a comma-separated step list.

    Args:
        value: Step list (e.g. "SE, GR ,OS")

    Returns:
        Trimmed, non-empty step codes in order
    """
    return tuple(code.strip() for code in value.split(",") if code.strip())


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero for positive values.

    Args:
        value: Number to round

    Returns:
        Rounded integer (483.5 -> 484, 483.49 -> 483)
    """
    return int(math.floor(value + 0.5))


def sanitize_filename(name: str, max_length: int = 255) -> str:
    """
    Sanitize a string for use as a filename.

    Args:
        name: Input string
        max_length: Maximum filename length

    Returns:
        Sanitized filename-safe string
    """
    # Remove or replace invalid characters
    sanitized = re.sub(r'[<>:"/\\|?*\x00-\x1f]', "_", name)

    sanitized = sanitized.strip(" .")
    sanitized = re.sub(r"_+", "_", sanitized)

    if len(sanitized) > max_length:
        # Preserve extension if present
        if "." in sanitized:
            name_part, ext = sanitized.rsplit(".", 1)
            max_name_len = max_length - len(ext) - 1
            sanitized = f"{name_part[:max_name_len]}.{ext}"
        else:
            sanitized = sanitized[:max_length]

    if not sanitized:
        sanitized = "unnamed"

    return sanitized


def increment_filename(path: Path) -> Path:
    """
    Get the next numbered variant of a filename.

    ``photo.tif`` becomes ``photo_01.tif``, ``photo_01.tif`` becomes
    ``photo_02.tif``.

    Args:
        path: File path

    Returns:
        Path with the numeric suffix incremented
    """
    match = INCREMENT_PATTERN.match(path.stem)
    if match:
        stem = match.group("stem")
        number = int(match.group("number")) + 1
    else:
        stem = path.stem
        number = 1
    return path.with_name(f"{stem}_{number:02d}{path.suffix}")


def create_unique_filename(path: str | Path) -> Path:
    """
    Find a filename that does not exist yet.

    Args:
        path: Preferred file path

    Returns:
        ``path`` itself if free, otherwise the first free numbered variant

    Raises:
        FileExistsError: If all numbered variants up to 99 are taken
    """
    candidate = Path(path)
    while candidate.exists():
        match = INCREMENT_PATTERN.match(candidate.stem)
        if match and int(match.group("number")) >= MAX_INCREMENT:
            raise FileExistsError(f"No free filename left for {path}")
        candidate = increment_filename(candidate)
    return candidate


def format_duration(seconds: float) -> str:
    """
    Format seconds as human-readable duration.

    Args:
        seconds: Duration in seconds

    Returns:
        Human-readable string (e.g., "2h 30m 15s")
    """
    if seconds < 0:
        return "0s"

    delta = timedelta(seconds=int(seconds))

    parts = []

    days = delta.days
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)
