from pathlib import Path

import pytest
from PIL import Image

from lyre.exceptions import MediaError

HOME_TEMPLATE = """<html><head><title>Home</title></head><body>
<nav><!-- TAG_FILTERS --></nav>
<main><!-- PORTFOLIO_ITEMS --></main>
</body></html>
"""

POST_TEMPLATE = """<html><head><title><!-- BLOG_TITLE --></title>
<!-- OG_TAGS -->
</head><body><!-- BLOG_ITEM --></body></html>
"""


class FakeMediaProcessor:
    """Writes placeholder files instead of running ffmpeg."""

    def __init__(self, fail=(), duration=125.0):
        self.fail = set(fail)
        self.duration = duration
        self.calls = []
        self.temp_files = []

    def _step(self, name, path):
        self.calls.append(name)
        if name in self.fail:
            raise MediaError(path, f"{name} exploded")

    def probe_image_size(self, image):
        self._step("probe_image_size", image)
        with Image.open(image) as img:
            return img.size

    def trim_audio(self, source, dest, seconds):
        self._step("trim_audio", source)
        self.temp_files.append(dest)
        dest.write_bytes(source.read_bytes()[:10])

    def render_waveform(self, source, dest, size):
        self._step("render_waveform", source)
        self.temp_files.append(dest)
        Image.new("RGBA", size, (255, 255, 255, 255)).save(dest)

    def overlay_image(self, base, overlay, dest, opacity):
        self._step("overlay_image", dest)
        Image.new("RGB", (8, 8), "black").save(dest, "JPEG")

    def encode_video(self, image, audio, dest, max_duration):
        if "encode_video_partial" in self.fail:
            dest.write_bytes(b"partial")
        self._step("encode_video", dest)
        dest.write_bytes(b"mp4")

    def probe_audio_duration(self, audio):
        self._step("probe_audio_duration", audio)
        return self.duration


def write_post(content_dir: Path, name: str, frontmatter: str, body: str = "Body") -> Path:
    content_dir.mkdir(parents=True, exist_ok=True)
    path = content_dir / name
    path.write_text(f"---\n{frontmatter}\n---\n{body}\n", encoding="utf-8")
    return path


def write_cover(path: Path, size=(40, 20)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, "navy").save(path, "JPEG")
    return path


@pytest.fixture
def fake_media():
    return FakeMediaProcessor()


@pytest.fixture
def project(tmp_path):
    """Project root with both templates and an empty content directory."""
    (tmp_path / "content").mkdir()
    (tmp_path / "template.html").write_text(HOME_TEMPLATE, encoding="utf-8")
    (tmp_path / "template-post.html").write_text(POST_TEMPLATE, encoding="utf-8")
    return tmp_path
