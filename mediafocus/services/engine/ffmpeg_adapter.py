# mediafocus/services/engine/ffmpeg_adapter.py
from __future__ import annotations

import asyncio
import shlex
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from mediafocus.common.concurrency.line_channel import LineChannel, StreamEnd
from mediafocus.common.logging import get_logger
from mediafocus.common.settings import get_settings
from mediafocus.domain.enums.exit_status import EngineExitStatus
from mediafocus.domain.ports.engine import AnalysisEnginePort

logger = get_logger(__name__)


@dataclass(frozen=True)
class EngineError(RuntimeError):
    """Adapter-level error for engine failures."""
    message: str
    stderr: Optional[str] = None
    rc: Optional[int] = None


@dataclass(frozen=True)
class EngineUnavailableError(EngineError):
    """The engine could not be started at all; no line was produced."""


def build_engine_cmd(
    ffmpeg_bin: str,
    input_path: str | Path,
    *,
    frame_filter: str = "showinfo",
    log_level: str = "info",
    extra_args: Iterable[str] | None = None,
) -> List[str]:
    """
    Probe command: prints the input banner, then one frame-report line per
    decoded video frame. Output goes to the null muxer, so nothing is written.
    """
    cmd = [
        ffmpeg_bin,
        "-hide_banner",
        "-nostdin",
        "-nostats",
        "-loglevel", log_level,
        "-i", str(input_path),
        "-map", "0:v:0?",
        "-vf", frame_filter,
        "-f", "null",
    ]
    if extra_args:
        cmd.extend(extra_args)
    cmd.append("-")
    return cmd


class FFmpegEngine(AnalysisEnginePort):
    """
    Infrastructure adapter implementing AnalysisEnginePort with `ffmpeg`.
    Lines are read from stderr as they are written and pushed into the channel
    without blocking the event loop.
    """

    def __init__(
        self,
        ffmpeg_bin: Optional[str] = None,
        timeout_sec: Optional[int] = None,
        frame_filter: Optional[str] = None,
    ) -> None:
        cfg = get_settings()
        self._candidate = ffmpeg_bin or cfg.ffmpeg_bin
        self.timeout_sec = int(timeout_sec or cfg.engine.timeout_sec)
        self.frame_filter = frame_filter or cfg.engine.frame_filter
        self.log_level = cfg.engine.log_level

    def resolve_binary(self) -> str:
        candidate = self._candidate
        if Path(candidate).is_absolute():
            if not Path(candidate).is_file():
                raise EngineUnavailableError(f"ffmpeg binary not found: {candidate}")
            return candidate
        resolved = shutil.which(candidate)
        if not resolved:
            raise EngineUnavailableError("ffmpeg not found on PATH; set FFMPEG_BIN or install ffmpeg.")
        return resolved

    # ---- Port API -------------------------------------------------------------
    async def run(self, path: Path, channel: LineChannel) -> None:
        if not path:
            raise EngineError("No path provided to run().")
        if not Path(path).is_file():
            raise EngineError(f"File not found: {path}")

        cmd = build_engine_cmd(
            self.resolve_binary(),
            path,
            frame_filter=self.frame_filter,
            log_level=self.log_level,
        )
        logger.debug("engine cmd: %s", " ".join(shlex.quote(p) for p in cmd))

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise EngineUnavailableError("Failed to execute ffmpeg (OS error).", stderr=str(e)) from e

        try:
            await asyncio.wait_for(self._pump(proc, channel), timeout=self.timeout_sec)
        except asyncio.TimeoutError:
            logger.warning("ffmpeg timed out after %ss; keeping captured lines", self.timeout_sec)
            proc.kill()
        except BaseException:
            # cancelled run or unreadable output: never leave ffmpeg behind
            await self._reap(proc)
            raise

        rc = await proc.wait()
        if rc != 0:
            logger.info("ffmpeg exited with rc=%s for %s", rc, Path(path).name)
        await channel.close(StreamEnd(EngineExitStatus.from_return_code(rc), rc))

    @staticmethod
    async def _reap(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        rc = await proc.wait()
        logger.debug("ffmpeg pid %s reaped (rc=%s)", proc.pid, rc)

    @staticmethod
    async def _pump(proc: asyncio.subprocess.Process, channel: LineChannel) -> None:
        if proc.stderr is None:
            raise EngineError("ffmpeg stderr was not captured")
        async for raw in proc.stderr:
            line = raw.decode("utf-8", "replace").rstrip("\r\n")
            if line:
                await channel.put(line)
