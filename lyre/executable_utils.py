"""Executable discovery utilities for Lyre.

This module locates the external media tools (ffmpeg, ffprobe) used by the
derived media generator, honouring explicit overrides from ``lyre.yaml``.

Functions:
    find_executable: Locate an executable by override or on PATH.
"""

from __future__ import annotations

import shutil
from pathlib import Path


def find_executable(name: str, override: str | None = None) -> str | None:
    """Find an executable, preferring an explicitly configured path.

    Args:
        name: Name of the executable to find (e.g., 'ffmpeg', 'ffprobe').
        override: Optional configured path or command name. Relative names
            are looked up on PATH like ``name``.

    Returns:
        Full path to the executable if found, None otherwise.

    Examples:
        >>> find_executable('ffmpeg')  # System PATH lookup
        '/usr/bin/ffmpeg'

        >>> find_executable('ffmpeg', '/opt/ffmpeg/bin/ffmpeg')
        '/opt/ffmpeg/bin/ffmpeg'
    """
    if override:
        candidate = Path(override).expanduser()
        if candidate.is_file():
            return str(candidate)
        return shutil.which(override)
    return shutil.which(name)
