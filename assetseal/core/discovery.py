"""Asset discovery — turn CLI inputs into a stable, sorted list of files."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


def _is_hidden(path: Path, root: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(root).parts)


def _is_within(path: Path, other: Path) -> bool:
    try:
        path.resolve().relative_to(other.resolve())
    except ValueError:
        return False
    return True


def discover_assets(
    root: Path | str,
    patterns: Sequence[str] = ("*",),
    *,
    recursive: bool = True,
    exclude: Iterable[Path | str] = (),
) -> list[Path]:
    """Return regular files under *root* matching any of *patterns*.

    A file path is returned as-is unless it is excluded.  Directories are
    walked (recursively by default); hidden entries and anything that is, or
    lies under, an *exclude* path are skipped.  Results are sorted so runs
    are reproducible.
    """
    root = Path(root)
    excluded = [Path(e) for e in exclude]
    if root.is_file():
        if any(_is_within(root, ex) for ex in excluded):
            logger.warning("Skipping excluded input %s", root)
            return []
        return [root]
    if not root.is_dir():
        raise FileNotFoundError(f"Input not found: {root}")

    found: set[Path] = set()
    for pattern in patterns:
        matches = root.rglob(pattern) if recursive else root.glob(pattern)
        for path in matches:
            if not path.is_file() or path.is_symlink():
                continue
            if _is_hidden(path, root):
                continue
            if any(_is_within(path, ex) for ex in excluded):
                continue
            found.add(path)

    result = sorted(found)
    logger.debug("Discovered %d assets under %s", len(result), root)
    return result


def discover_many(
    inputs: Iterable[Path | str],
    patterns: Sequence[str] = ("*",),
    *,
    recursive: bool = True,
    exclude: Iterable[Path | str] = (),
) -> list[Path]:
    """``discover_assets`` over several inputs, de-duplicated, order kept."""
    excluded = list(exclude)
    seen: set[Path] = set()
    ordered: list[Path] = []
    for item in inputs:
        for path in discover_assets(item, patterns, recursive=recursive, exclude=excluded):
            if path not in seen:
                seen.add(path)
                ordered.append(path)
    return ordered
