"""Lyre static site generator.

This package turns a folder of markdown posts with YAML front matter into a
static site: a filterable home page, one page per post, a JSON manifest and an
RSS/podcast feed. Posts tagged ``music`` that reference an audio file also get
a waveform preview image and a still-image video generated through ffmpeg.

The main entry point is the CLI module, which provides commands for building
the site once, rebuilding it on change, and creating new posts.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
