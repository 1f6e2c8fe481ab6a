"""
Single source of version: read from the repo root VERSION file.
Used by the FastAPI app metadata and GET /api/v1/meta/version.
"""

from __future__ import annotations

import re
from pathlib import Path

DEFAULT_VERSION = "0.0.0"

# Semantic version pattern (major.minor.patch, optional -pre)
SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.]+)?$")


def _version_file_path() -> Path:
    # backend/version.py -> repo root
    return Path(__file__).resolve().parent.parent / "VERSION"


def get_version() -> str:
    """First line of VERSION when it is a semantic version, else DEFAULT_VERSION."""
    path = _version_file_path()
    try:
        raw = path.read_text(encoding="utf-8").strip()
    except OSError:
        return DEFAULT_VERSION
    first_line = raw.splitlines()[0].strip() if raw else ""
    return first_line if is_semver(first_line) else DEFAULT_VERSION


def is_semver(s: str) -> bool:
    """Return True if s matches semantic version pattern (e.g. 1.0.0 or 1.0.0-alpha)."""
    return bool(s and SEMVER_PATTERN.match(s.strip()))
