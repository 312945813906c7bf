"""Collecting and reading template files."""

import logging
from fnmatch import fnmatch
from pathlib import Path

from templint.config import get_settings

logger = logging.getLogger(__name__)


def is_template_file(file_path: Path, suffixes: list[str]) -> bool:
    return file_path.suffix.lower() in {suffix.lower() for suffix in suffixes}


def read_template(file_path: Path) -> str:
    """Read a template as text."""
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ValueError(f"Failed to read template {file_path}: {e}") from e


def parse_ignore_file(ignore_file: Path) -> list[str]:
    """Read patterns from an ignore file, skipping blank lines and comments."""
    try:
        with ignore_file.open("r", encoding="utf-8") as f:
            stripped = (line.strip() for line in f)
            return [line for line in stripped if line and not line.startswith("#")]
    except OSError as e:
        logger.warning("Failed to read ignore file %s: %s", ignore_file, e)
        return []


def find_ignore_files(target_path: Path, ignore_file_patterns: list[str]) -> dict[Path, list[str]]:
    """Map each directory holding an ignore file to the patterns it declares."""
    ignore_files_map: dict[Path, list[str]] = {}
    if not target_path.is_dir():
        return ignore_files_map

    for pattern in ignore_file_patterns:
        for ignore_file in sorted(target_path.glob(pattern)):
            if not ignore_file.is_file():
                continue
            patterns = parse_ignore_file(ignore_file)
            if patterns:
                ignore_files_map.setdefault(ignore_file.parent, []).extend(patterns)
                logger.debug("Loaded %d pattern(s) from %s", len(patterns), ignore_file)
    return ignore_files_map


def matches_pattern(file_path: Path, pattern: str, base_path: Path) -> bool:
    """Match a file against a gitignore-style glob relative to ``base_path``.

    Negated patterns (``!foo``) never match here.
    """
    if pattern.startswith("!"):
        return False
    try:
        rel_path = file_path.relative_to(base_path).as_posix()
    except ValueError:
        return False

    if pattern.endswith("/"):
        directory = pattern.rstrip("/").lstrip("/")
        return any(fnmatch(part, directory) for part in Path(rel_path).parts[:-1])

    if pattern.startswith("/"):
        return fnmatch(rel_path, pattern.lstrip("/"))

    if fnmatch(rel_path, pattern) or fnmatch(file_path.name, pattern):
        return True

    if pattern.startswith("**/"):
        return matches_pattern(file_path, pattern[3:], base_path)
    if pattern.endswith("/**"):
        return rel_path.startswith(pattern[:-3].strip("/") + "/")
    return False


def should_ignore_file(
    file_path: Path,
    target_path: Path,
    ignore_patterns: list[str],
    ignore_files_map: dict[Path, list[str]],
) -> bool:
    """Check CLI patterns, then ignore files from the file's directory up to the target."""
    for pattern in ignore_patterns:
        if matches_pattern(file_path, pattern, target_path):
            logger.debug("%s matched ignore pattern %s", file_path, pattern)
            return True

    current = file_path.parent
    while True:
        for pattern in ignore_files_map.get(current, []):
            if matches_pattern(file_path, pattern, current):
                logger.debug("%s matched pattern '%s' from %s", file_path, pattern, current)
                return True
        if current == target_path or current.parent == current:
            return False
        current = current.parent


def collect_template_files(target_path: Path) -> list[Path]:
    """Collect templates from a file or directory, applying ignore patterns."""
    settings = get_settings()
    ignore_patterns = settings.ignore_patterns
    ignore_file_patterns = settings.ignore_file_patterns

    if target_path.is_file():
        ignore_files_map = find_ignore_files(target_path.parent, ignore_file_patterns)
        if should_ignore_file(target_path, target_path.parent, ignore_patterns, ignore_files_map):
            logger.info("%s is ignored by patterns", target_path)
            return []
        return [target_path]

    if not target_path.is_dir():
        return []

    ignore_files_map = find_ignore_files(target_path, ignore_file_patterns)
    files = sorted(
        file
        for file in target_path.rglob("*")
        if file.is_file()
        and is_template_file(file, settings.template_suffixes)
        and not should_ignore_file(file, target_path, ignore_patterns, ignore_files_map)
    )
    logger.info("Found %d template(s) in %s (after applying ignore patterns)", len(files), target_path)
    return files
