"""Derived media generation for Lyre.

Audio posts (tagged ``music`` with a ``music-source``) get two generated
artifacts next to their audio file:

- ``<stem>-waveform.jpg``: the first 50 seconds of audio drawn as a
  waveform, composited at half opacity over the post's cover image.
- ``<stem>.mp4``: the waveform (or the plain cover) looped as a still
  video over the full audio track, for social players.

Encoding is expensive, so a video newer than its audio is never rebuilt.
Every failure here is reported and swallowed: the post is published
without the missing artifact.

Key classes:
- FFmpegMediaProcessor: MediaProcessor backed by ffmpeg, ffprobe and Pillow.
- DerivedMediaGenerator: Per-entry waveform and video generation.
"""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path, PurePosixPath

from PIL import Image

from .content import Entry
from .exceptions import MediaError
from .executable_utils import find_executable
from .protocols import MediaProcessor

DEFAULT_CANVAS = (1200, 630)
WAVEFORM_SEGMENT_SECONDS = 50
WAVEFORM_OPACITY = 0.5
MAX_VIDEO_SECONDS = 600
VIDEO_CODEC = "libx264"
AUDIO_BITRATE = "192k"
WAVEFORM_COLOR = "white"


def waveform_reference(music_source: str) -> str:
    """Site-relative path of the waveform image for an audio path.

    Examples:
        >>> waveform_reference("/music/a.mp3")
        '/music/a-waveform.jpg'
    """
    source = PurePosixPath(music_source)
    return str(source.with_name(f"{source.stem}-waveform.jpg"))


def video_reference(music_source: str) -> str:
    """Site-relative path of the preview video for an audio path.

    Examples:
        >>> video_reference("a.mp3")
        'a.mp4'
    """
    source = PurePosixPath(music_source)
    return str(source.with_name(f"{source.stem}.mp4"))


class FFmpegMediaProcessor:
    """Runs the media operations through ffmpeg, ffprobe and Pillow.

    Image probing and compositing use Pillow; audio trimming, waveform
    drawing and video encoding shell out to ffmpeg.

    Attributes:
        ffmpeg: Path to the ffmpeg binary, or None when not installed.
        ffprobe: Path to the ffprobe binary, or None when not installed.
    """

    def __init__(self, ffmpeg: str | None = None, ffprobe: str | None = None):
        self.ffmpeg = find_executable("ffmpeg", ffmpeg)
        self.ffprobe = find_executable("ffprobe", ffprobe)

    def probe_image_size(self, image: Path) -> tuple[int, int]:
        try:
            with Image.open(image) as img:
                width, height = img.size
        except (OSError, ValueError) as exc:
            raise MediaError(image, f"could not read image size: {exc}") from exc
        if not width or not height:
            raise MediaError(image, "image has no pixels")
        return width, height

    def trim_audio(self, source: Path, dest: Path, seconds: float) -> None:
        self._run_ffmpeg(
            source,
            ["-i", str(source), "-t", str(seconds), "-vn", "-c:a", "copy", str(dest)],
        )

    def render_waveform(self, source: Path, dest: Path, size: tuple[int, int]) -> None:
        width, height = size
        self._run_ffmpeg(
            source,
            [
                "-i",
                str(source),
                "-filter_complex",
                f"showwavespic=s={width}x{height}:colors={WAVEFORM_COLOR}",
                "-frames:v",
                "1",
                str(dest),
            ],
        )

    def overlay_image(
        self, base: Path, overlay: Path, dest: Path, opacity: float
    ) -> None:
        try:
            with Image.open(base) as base_img, Image.open(overlay) as overlay_img:
                canvas = base_img.convert("RGBA")
                layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
                layer.paste(overlay_img.convert("RGBA"), (0, 0))
            alpha = layer.getchannel("A").point(lambda value: int(value * opacity))
            layer.putalpha(alpha)
            composite = Image.alpha_composite(canvas, layer).convert("RGB")
            composite.save(dest, "JPEG", quality=90)
        except (OSError, ValueError) as exc:
            raise MediaError(dest, f"could not composite waveform: {exc}") from exc

    def encode_video(
        self, image: Path, audio: Path, dest: Path, max_duration: float
    ) -> None:
        self._run_ffmpeg(
            audio,
            [
                "-loop",
                "1",
                "-i",
                str(image),
                "-i",
                str(audio),
                "-c:v",
                VIDEO_CODEC,
                "-tune",
                "stillimage",
                "-pix_fmt",
                "yuv420p",
                "-vf",
                "scale=trunc(iw/2)*2:trunc(ih/2)*2",
                "-c:a",
                "aac",
                "-b:a",
                AUDIO_BITRATE,
                "-t",
                str(max_duration),
                "-shortest",
                str(dest),
            ],
        )

    def probe_audio_duration(self, audio: Path) -> float:
        if not self.ffprobe:
            raise MediaError(audio, "ffprobe not found")
        cmd = [
            self.ffprobe,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            str(audio),
        ]
        result = self._run(audio, cmd)
        try:
            return float(result.stdout.strip())
        except ValueError as exc:
            raise MediaError(audio, f"unexpected duration {result.stdout!r}") from exc

    def _run_ffmpeg(self, path: Path, args: list[str]) -> None:
        if not self.ffmpeg:
            raise MediaError(path, "ffmpeg not found")
        self._run(path, [self.ffmpeg, "-y", "-hide_banner", "-loglevel", "error", *args])

    def _run(self, path: Path, cmd: list[str]) -> subprocess.CompletedProcess:
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, errors="replace"
            )
        except OSError as exc:
            raise MediaError(path, f"could not run {cmd[0]}: {exc}") from exc
        if result.returncode != 0:
            detail = result.stderr.strip().splitlines()
            message = detail[-1] if detail else f"exit status {result.returncode}"
            raise MediaError(path, f"{Path(cmd[0]).name} failed: {message}")
        return result


class DerivedMediaGenerator:
    """Generates waveform images and preview videos for audio posts.

    Paths in entries are site-relative (``/music/a.mp3`` or ``a.mp3``) and
    resolve against ``media_root``.

    Attributes:
        processor: Media tool implementation.
        media_root: Directory site-relative paths resolve against.
        default_cover: Site-relative cover used when a post has none.
        default_canvas: Canvas size when the cover cannot be probed.
    """

    def __init__(
        self,
        processor: MediaProcessor,
        media_root: Path,
        default_cover: str,
        default_canvas: tuple[int, int] = DEFAULT_CANVAS,
    ):
        self.processor = processor
        self.media_root = media_root
        self.default_cover = default_cover
        self.default_canvas = default_canvas

    def resolve(self, reference: str) -> Path:
        """Map a site-relative path to a file under ``media_root``."""
        return self.media_root / reference.lstrip("/")

    def process(self, entry: Entry) -> None:
        """Generate derived media for one entry and record what exists.

        Non-audio entries are left untouched. ``waveform_image`` and
        ``video_source`` are only set for artifacts present on disk.
        """
        if not entry.is_rich_media:
            return
        music_source = entry.music_source
        audio = self.resolve(music_source)
        if not audio.is_file():
            print(f"Audio file not found for {entry.slug}: {audio}")
            return

        cover = self.resolve(entry.cover_image or self.default_cover)
        waveform_ref = waveform_reference(music_source)
        video_ref = video_reference(music_source)

        waveform = self.generate_waveform(audio, self.resolve(waveform_ref), cover)
        if waveform is not None:
            entry.waveform_image = waveform_ref

        still = waveform if waveform is not None else cover
        video = self.generate_video(audio, self.resolve(video_ref), still)
        if video is not None:
            entry.video_source = video_ref

        try:
            entry.duration = self.processor.probe_audio_duration(audio)
        except MediaError as exc:
            print(f"Duration probe failed for {audio}: {exc.message}")

    def canvas_size(self, cover: Path) -> tuple[int, int]:
        """Return the cover's pixel size, or the default canvas."""
        try:
            return self.processor.probe_image_size(cover)
        except MediaError as exc:
            print(
                f"Could not size cover {cover} ({exc.message}); "
                f"using {self.default_canvas[0]}x{self.default_canvas[1]}"
            )
            return self.default_canvas

    def generate_waveform(self, audio: Path, output: Path, cover: Path) -> Path | None:
        """Draw the waveform of ``audio`` over ``cover`` into ``output``.

        Transient files live in a temporary directory that is removed
        whether or not the steps succeed.

        Returns:
            ``output`` on success, None when any step failed.
        """
        size = self.canvas_size(cover)
        output.parent.mkdir(parents=True, exist_ok=True)
        try:
            with tempfile.TemporaryDirectory(prefix="lyre-waveform-") as tmp:
                segment = Path(tmp) / f"segment{audio.suffix}"
                wave = Path(tmp) / "wave.png"
                self.processor.trim_audio(audio, segment, WAVEFORM_SEGMENT_SECONDS)
                self.processor.render_waveform(segment, wave, size)
                self.processor.overlay_image(cover, wave, output, WAVEFORM_OPACITY)
            if not output.is_file():
                raise MediaError(output, "no image was written")
        except MediaError as exc:
            print(f"Waveform generation failed for {exc.path}: {exc.message}")
            output.unlink(missing_ok=True)
            return None
        return output

    def is_up_to_date(self, output: Path, audio: Path) -> bool:
        """True when ``output`` exists and is newer than ``audio``."""
        try:
            return output.stat().st_mtime > audio.stat().st_mtime
        except OSError:
            return False

    def generate_video(self, audio: Path, output: Path, still: Path) -> Path | None:
        """Encode ``still`` looped over ``audio`` into ``output``.

        Skipped entirely when ``output`` is newer than ``audio``.

        Returns:
            ``output`` when the video exists afterwards, None on failure.
        """
        if self.is_up_to_date(output, audio):
            print(f"Video up to date, skipping {output}")
            return output
        output.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.processor.encode_video(still, audio, output, MAX_VIDEO_SECONDS)
            if not output.is_file():
                raise MediaError(output, "no video was written")
        except MediaError as exc:
            print(f"Video generation failed for {exc.path}: {exc.message}")
            # a partial file would pass the up-to-date check next run
            output.unlink(missing_ok=True)
            return None
        print(f"Generated video {output}")
        return output
