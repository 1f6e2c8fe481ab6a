"""Entity discovery: locate and import the modules that declare mapped tables.

The pattern is a glob relative to the backend root (e.g. ``models/*.py``) and
may contain ``{a,b}`` alternatives. Importing a matched module registers its
models on ``Base.metadata``; only tables declared in discovered modules take
part in schema synchronization.
"""

from __future__ import annotations

import importlib
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional

from sqlalchemy import Table

from models.base import Base

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

BACKEND_ROOT = Path(__file__).resolve().parent.parent

_BRACE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternatives: ``models/*{.py,.pyw}`` -> two patterns."""
    match = _BRACE.search(pattern)
    if match is None:
        return [pattern]
    expanded: List[str] = []
    for option in match.group(1).split(","):
        replaced = pattern[: match.start()] + option + pattern[match.end():]
        expanded.extend(expand_braces(replaced))
    return expanded


def _module_name(path: Path, root: Path) -> str:
    relative = path.relative_to(root).with_suffix("")
    parts = list(relative.parts)
    if not all(part.isidentifier() for part in parts):
        raise ConfigurationError(f"Entity file {relative.as_posix()} is not importable as a module")
    return ".".join(parts)


def discover_entity_modules(pattern: str, root: Optional[Path] = None) -> List[str]:
    """Import every ``.py`` file under ``root`` matching ``pattern``.

    Returns the dotted module names in sorted order. Raises
    ConfigurationError when nothing matches or a match cannot be imported.
    """
    root = (root or BACKEND_ROOT).resolve()
    if Path(pattern).is_absolute():
        raise ConfigurationError(f"Entity pattern {pattern!r} must be relative to {root}")

    paths = set()
    for expanded in expand_braces(pattern):
        for path in root.glob(expanded):
            if not path.is_file() or path.suffix != ".py" or path.name == "__init__.py":
                continue
            resolved = path.resolve()
            if root not in resolved.parents:
                raise ConfigurationError(f"Entity pattern {pattern!r} matched a file outside {root}")
            paths.add(resolved)

    if not paths:
        raise ConfigurationError(f"Entity pattern {pattern!r} matched no modules under {root}")

    names = sorted(_module_name(path, root) for path in paths)
    for name in names:
        try:
            importlib.import_module(name)
        except ImportError as e:
            raise ConfigurationError(f"Could not import entity module {name}: {e}") from e
    logger.info("Discovered %d entity module(s) with pattern %r", len(names), pattern)
    return names


def entity_tables(module_names: Iterable[str]) -> List[Table]:
    """Mapped tables whose model class is declared in one of ``module_names``."""
    wanted = set(module_names)
    tables = {
        mapper.local_table
        for mapper in Base.registry.mappers
        if mapper.class_.__module__ in wanted
    }
    # Keep metadata order so foreign-key targets come first.
    return [table for table in Base.metadata.sorted_tables if table in tables]
