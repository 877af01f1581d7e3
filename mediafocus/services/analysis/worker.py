# mediafocus/services/analysis/worker.py
from __future__ import annotations

from mediafocus.common.concurrency.line_channel import LineChannel, StreamEnd
from mediafocus.common.logging import get_logger
from mediafocus.domain.dataclasses.results import AnalysisResult
from mediafocus.domain.enums.exit_status import EngineExitStatus
from mediafocus.services.analysis.context import RunContext

logger = get_logger(__name__)


class AnalysisWorker:
    """
    Drains a LineChannel into a RunContext, in delivery order, then finishes
    the run with the channel's StreamEnd.
    """

    async def consume(self, channel: LineChannel, ctx: RunContext) -> AnalysisResult:
        async for line in channel:
            ctx.feed_line(line)
        end = channel.end or StreamEnd(EngineExitStatus.failure)
        logger.debug("worker: stream ended for %s (%s)", ctx.file_attributes.name, end.exit_status)
        return ctx.finish(end)
