"""ffmpeg probe + supervisor for the simulated camera stream"""

import asyncio
import functools
import re
import subprocess
from pathlib import Path

import config
from logs import get_logger

logger = get_logger(__name__)

_VERSION_RE = re.compile(r"(\d+)\.(\d+)")
_PROBE = object()
STILL_SUFFIXES = (".png", ".jpg", ".jpeg")


def parse_version(output):
    """'ffmpeg version 4.1.6-1~deb10u1 Copyright ...' -> (4, 1)"""
    lines = (output or "").splitlines()
    if not lines:
        return None
    words = lines[0].split(" ")
    if len(words) < 3:
        return None
    m = _VERSION_RE.search(words[2])
    if m is None:
        return None
    return int(m.group(1)), int(m.group(2))


@functools.lru_cache(maxsize=None)
def ffmpeg_version(executable="ffmpeg"):
    """Probed once per process; None when ffmpeg is unusable."""
    try:
        proc = subprocess.run(
            [executable, "-version"],
            capture_output=True, text=True, timeout=10,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.info("ffmpeg_unavailable", executable=executable, error=str(e))
        return None
    if proc.returncode != 0:
        logger.info("ffmpeg_unavailable", executable=executable, returncode=proc.returncode)
        return None
    version = parse_version(proc.stdout)
    logger.info("ffmpeg_detected", executable=executable, version=version)
    return version


def transcode_args(version, source, manifest, debug=False, still=False):
    """A still image is looped and encoded; a video is looped and copied."""
    major, minor = version
    args = ["-y", "-re"]
    args += ["-loop", "1"] if still else ["-stream_loop", "-1"]
    args += [
        "-i", str(source),
        "-window_size", "5",
        "-extra_window_size", "10",
        "-use_template", "1",
        "-use_timeline", "1",
    ]
    if major >= 4:
        args += ["-streaming", "1", "-hls_playlist", "1"]
    if (major, minor) >= (4, 1):
        args += ["-seg_duration", "2", "-dash_segment_type", "mp4"]
    args += [
        "-remove_at_exit", "1",
        "-loglevel", "info" if debug else "quiet",
    ]
    if still:
        args += ["-c:v", "libx264", "-tune", "stillimage", "-pix_fmt", "yuv420p", "-an"]
    else:
        args += ["-c:v", "copy", "-c:a", "copy"]
    args += ["-f", "dash", str(manifest)]
    return args


class StreamSupervisor:
    """
    Keeps one ffmpeg process looping the sample video, or the still image
    when no video is shipped, into a live DASH (and HLS) stream.

    The supervising task respawns ffmpeg whenever it exits. stop() cancels
    that task before killing the process, so a deliberate stop is never
    mistaken for a crash. After shutdown() nothing can start it again.
    """

    def __init__(self, media_dir, source=None, executable="ffmpeg", version=_PROBE,
                 debug=False, spawn=None):
        self.media_dir = Path(media_dir)
        if source is None:
            video = config.STATIC_DIR / config.VIDEO_NAME
            source = video if video.exists() else config.STATIC_DIR / config.IMAGE_NAME
        self.source = Path(source)
        self.executable = executable
        self.version = ffmpeg_version(executable) if version is _PROBE else version
        self.debug = debug
        self._spawn = spawn or asyncio.create_subprocess_exec
        self._task = None
        self._process = None
        self._shutting_down = False
        self.spawns = 0

    @property
    def still(self):
        return self.source.suffix.lower() in STILL_SUFFIXES

    @property
    def manifest(self):
        return self.media_dir / config.DASH_MANIFEST

    @property
    def available(self):
        return self.version is not None

    @property
    def running(self):
        return self._task is not None

    @property
    def shutting_down(self):
        return self._shutting_down

    def start(self):
        if self._shutting_down or self._task is not None:
            return
        if self.version is None:
            logger.debug("transcode_skipped", reason="ffmpeg unavailable")
            return
        if not self.source.exists():
            logger.warning("transcode_skipped", reason="missing source", source=str(self.source))
            return
        self._task = asyncio.get_running_loop().create_task(self._supervise())
        self._task.add_done_callback(self._supervise_done)

    def _supervise_done(self, task):
        if self._task is task:
            self._task = None
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("transcode_supervisor_failed", exc_info=exc)
            proc, self._process = self._process, None
            if proc is not None and proc.returncode is None:
                proc.terminate()

    def stop(self):
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
        proc, self._process = self._process, None
        if proc is not None and proc.returncode is None:
            try:
                proc.terminate()
            except ProcessLookupError:
                pass
            logger.info("transcode_stopped", pid=proc.pid)

    def shutdown(self):
        self._shutting_down = True
        self.stop()

    async def _supervise(self):
        args = transcode_args(self.version, self.source, self.manifest, self.debug, self.still)
        pipe = subprocess.PIPE if self.debug else subprocess.DEVNULL
        while True:
            try:
                self.media_dir.mkdir(parents=True, exist_ok=True)
                proc = await self._spawn(
                    self.executable, *args,
                    stdin=subprocess.DEVNULL, stdout=pipe, stderr=pipe,
                )
            except OSError as e:
                logger.error("transcode_spawn_failed", error=str(e))
                await asyncio.sleep(config.TRANSCODE_RETRY_DELAY)
                continue

            self._process = proc
            self.spawns += 1
            logger.info("transcode_started", pid=proc.pid, spawns=self.spawns)

            if self.debug:
                returncode, _, _ = await asyncio.gather(
                    proc.wait(),
                    self._echo(proc.stdout),
                    self._echo(proc.stderr),
                )
            else:
                returncode = await proc.wait()

            self._process = None
            logger.warning("transcode_exited", pid=proc.pid, returncode=returncode)

    async def _echo(self, stream):
        if stream is None:
            return
        async for line in stream:
            logger.debug("ffmpeg", line=line.decode(errors="replace").rstrip())
