"""Protocol definitions for Lyre.

This module defines the interfaces (protocols) that separate the build
pipeline from its external collaborators: the markdown renderer and the
media tool that produces waveform images and preview videos.

These protocols enable:
- Faking ffmpeg in tests without spawning processes
- Swapping the markdown engine without touching the entry parser
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class ContentRenderer(Protocol):
    """Protocol for rendering a markdown body to HTML."""

    @abstractmethod
    def render(self, content: str) -> str:
        """Render markdown source to an HTML string.

        Args:
            content: Markdown body with the front matter removed.

        Returns:
            Rendered HTML.
        """
        ...


@runtime_checkable
class MediaProcessor(Protocol):
    """Protocol for the external media tool.

    Every operation either completes and leaves its output on disk or
    raises ``MediaError``. Callers decide whether a failure is fatal.
    """

    @abstractmethod
    def probe_image_size(self, image: Path) -> tuple[int, int]:
        """Return the ``(width, height)`` of an image in pixels."""
        ...

    @abstractmethod
    def trim_audio(self, source: Path, dest: Path, seconds: float) -> None:
        """Write at most the first ``seconds`` of ``source`` to ``dest``."""
        ...

    @abstractmethod
    def render_waveform(self, source: Path, dest: Path, size: tuple[int, int]) -> None:
        """Render a waveform picture of ``source`` at ``size`` to ``dest``."""
        ...

    @abstractmethod
    def overlay_image(
        self, base: Path, overlay: Path, dest: Path, opacity: float
    ) -> None:
        """Composite ``overlay`` over ``base`` at the top-left corner.

        The overlay is not rescaled; ``opacity`` scales its alpha.
        """
        ...

    @abstractmethod
    def encode_video(
        self, image: Path, audio: Path, dest: Path, max_duration: float
    ) -> None:
        """Encode a looped still image with an audio track into ``dest``.

        Encoding stops when the audio ends or at ``max_duration`` seconds.
        """
        ...

    @abstractmethod
    def probe_audio_duration(self, audio: Path) -> float:
        """Return the length of an audio file in seconds."""
        ...
