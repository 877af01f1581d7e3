from __future__ import annotations
from pathlib import Path
from typing import Protocol

from mediafocus.common.concurrency.line_channel import LineChannel


class AnalysisEnginePort(Protocol):
    """
    Runs the external analysis engine against `path`, pushing every diagnostic
    line into `channel` and closing it with the exit status when done.
    """
    async def run(self, path: Path, channel: LineChannel) -> None: ...
