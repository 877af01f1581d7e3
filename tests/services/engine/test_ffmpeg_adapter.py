from __future__ import annotations

import asyncio
import os
import stat
import sys
from pathlib import Path

import pytest

from mediafocus.common.concurrency.line_channel import LineChannel
from mediafocus.domain.enums.exit_status import EngineExitStatus
from mediafocus.services.analysis.service import AnalysisService
from mediafocus.services.engine.ffmpeg_adapter import (
    EngineError,
    EngineUnavailableError,
    FFmpegEngine,
    build_engine_cmd,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses a shell script as the engine")


def _fake_ffmpeg(tmp_path: Path, rc: int = 1) -> Path:
    script = tmp_path / "ffmpeg"
    script.write_text(
        "#!/bin/sh\n"
        "echo \"Input #0, matroska,webm, from 'in.mkv':\" >&2\n"
        "echo '  Duration: 00:00:04.00, start: 0.000000, bitrate: 800 kb/s' >&2\n"
        "echo '  Stream #0:0: Video: vp9 (Profile 0), yuv420p(tv), 640x360, 25 fps, 25 tbr, 1k tbn' >&2\n"
        "echo '' >&2\n"
        "echo '[Parsed_showinfo_0 @ 0x1] n:   0 pts:      0 pts_time:0 iskey:1 type:I pkt_size:9000' >&2\n"
        "echo '[Parsed_showinfo_0 @ 0x1] n:   1 pts:     40 pts_time:0.04 iskey:0 type:P pkt_size:1000' >&2\n"
        f"exit {rc}\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    return script


def _hanging_ffmpeg(tmp_path: Path) -> Path:
    script = tmp_path / "ffmpeg-hangs"
    script.write_text(
        "#!/bin/sh\n"
        f"echo $$ > {tmp_path / 'engine.pid'}\n"
        "echo '  Duration: 00:10:00.00, start: 0.000000, bitrate: 800 kb/s' >&2\n"
        "exec sleep 30\n"
    )
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    return script


def _is_running(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    return True


def test_build_engine_cmd_shape():
    cmd = build_engine_cmd("/usr/bin/ffmpeg", "/media/in.mp4")
    assert cmd[0] == "/usr/bin/ffmpeg"
    assert cmd[cmd.index("-i") + 1] == "/media/in.mp4"
    assert cmd[cmd.index("-vf") + 1] == "showinfo"
    assert cmd[cmd.index("-loglevel") + 1] == "info"
    assert cmd[-3:] == ["-f", "null", "-"]


def test_build_engine_cmd_extra_args_before_output():
    cmd = build_engine_cmd("ffmpeg", "in.mp4", extra_args=["-t", "5"])
    assert cmd[-3:] == ["-t", "5", "-"]


def test_missing_binary_is_unavailable(tmp_path):
    engine = FFmpegEngine(ffmpeg_bin=str(tmp_path / "nope" / "ffmpeg"))
    with pytest.raises(EngineUnavailableError):
        engine.resolve_binary()


def test_missing_binary_on_path_is_unavailable(monkeypatch):
    monkeypatch.setattr("shutil.which", lambda _name: None)
    with pytest.raises(EngineUnavailableError):
        FFmpegEngine(ffmpeg_bin="ffmpeg").resolve_binary()


def test_missing_input_file(tmp_path):
    engine = FFmpegEngine(ffmpeg_bin=str(_fake_ffmpeg(tmp_path)))
    with pytest.raises(EngineError):
        asyncio.run(engine.run(tmp_path / "missing.mkv", LineChannel()))


@posix_only
def test_run_streams_stderr_lines(tmp_path):
    media = tmp_path / "in.mkv"
    media.write_bytes(b"\x1a\x45\xdf\xa3")
    engine = FFmpegEngine(ffmpeg_bin=str(_fake_ffmpeg(tmp_path, rc=1)), timeout_sec=30)

    async def main():
        ch = LineChannel(maxsize=64)
        await engine.run(media, ch)
        return [line async for line in ch], ch.end

    lines, end = asyncio.run(main())
    assert lines[0].startswith("Input #0")
    assert "" not in lines
    assert len(lines) == 5
    assert end.exit_status == EngineExitStatus.failure
    assert end.return_code == 1


@posix_only
def test_service_end_to_end_with_engine(tmp_path, file_attrs):
    media = tmp_path / "in.mkv"
    media.write_bytes(b"\x1a\x45\xdf\xa3")
    engine = FFmpegEngine(ffmpeg_bin=str(_fake_ffmpeg(tmp_path, rc=0)), timeout_sec=30)

    result = asyncio.run(AnalysisService(engine).analyze_file(media, file_attrs))

    assert result.report.exit_status == EngineExitStatus.success
    assert result.metadata.duration_seconds == 4.0
    assert result.metadata.video.resolution == "640x360"
    assert [f.frame_number for f in result.frames] == [0, 1]
    assert result.frames[1].estimated_bitrate_kbps == pytest.approx(200.0)
    assert result.analytics.frame_rate_used == 25.0


@posix_only
def test_cancelled_run_kills_engine(tmp_path):
    media = tmp_path / "in.mkv"
    media.write_bytes(b"\x1a\x45\xdf\xa3")
    engine = FFmpegEngine(ffmpeg_bin=str(_hanging_ffmpeg(tmp_path)), timeout_sec=60)

    async def main():
        ch = LineChannel(maxsize=64)
        task = asyncio.create_task(engine.run(media, ch))
        first = await ch.get()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        return first

    first = asyncio.run(main())
    assert "Duration:" in first
    pid = int((tmp_path / "engine.pid").read_text().strip())
    assert not _is_running(pid)


@posix_only
def test_abandoned_analysis_kills_engine(tmp_path, file_attrs):
    media = tmp_path / "in.mkv"
    media.write_bytes(b"\x1a\x45\xdf\xa3")
    engine = FFmpegEngine(ffmpeg_bin=str(_hanging_ffmpeg(tmp_path)), timeout_sec=60)
    svc = AnalysisService(engine)

    async def main():
        await asyncio.wait_for(svc.analyze_file(media, file_attrs), timeout=1.0)

    with pytest.raises(asyncio.TimeoutError):
        asyncio.run(main())
    pid = int((tmp_path / "engine.pid").read_text().strip())
    assert not _is_running(pid)
