"""
Streaming relay for CRO analysis

Turns one slow analysis (fetch page → call model → parse) into a long-lived
event stream:

- ``progress`` {value}: non-decreasing, stays below 100
- ``ping`` {t}: keepalive for idle-timeout proxies, no meaning
- ``result`` (the report) or ``error`` {message}: exactly one, always last,
  carrying ``progress: 100``

Progress comes from two sources feeding the same counter: real state
transitions of the pipeline raise it to a per-state floor, and a ticker nudges
it forward on a timer so the bar keeps moving during the long model call.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional, Set

from analyzer.urls import InvalidURLError, normalize_url
from core.pipeline import AnalysisPipeline, AnalysisState
from utils.sse import sse_event

logger = logging.getLogger(__name__)

RelayState = AnalysisState

STATE_PROGRESS_FLOOR: Dict[AnalysisState, int] = {
    AnalysisState.FETCHING: 5,
    AnalysisState.EXTRACTING: 25,
    AnalysisState.MODEL_CALLING: 35,
    AnalysisState.PARSING: 90,
}

TERMINAL_EVENTS = ("result", "error")


@dataclass(frozen=True)
class RelayConfig:
    tick_seconds: float = 1.0
    tick_step: int = 3
    progress_cap: int = 95
    heartbeat_seconds: float = 15.0

    def __post_init__(self):
        if not 0 <= self.progress_cap < 100:
            raise ValueError("progress_cap must be in [0, 100)")
        if self.tick_seconds <= 0 or self.heartbeat_seconds <= 0:
            raise ValueError("timer intervals must be positive")

    @classmethod
    def from_settings(cls, settings) -> "RelayConfig":
        return cls(
            tick_seconds=settings.PROGRESS_TICK_SECONDS,
            tick_step=settings.PROGRESS_TICK_STEP,
            progress_cap=settings.PROGRESS_CAP,
            heartbeat_seconds=settings.HEARTBEAT_SECONDS,
        )


class RelayRun:
    """State and progress of a single stream. Terminal states are absorbing."""

    def __init__(self, progress_cap: int):
        self.state = AnalysisState.IDLE
        self.progress = 0
        self.progress_cap = progress_cap

    def advance(self, state: AnalysisState):
        if self.state.terminal:
            raise RuntimeError(f"relay already finished in state {self.state.value}")
        logger.debug(f"relay {self.state.value} -> {state.value}")
        self.state = state

    def raise_progress(self, value: int) -> Optional[int]:
        """Move progress up to ``value`` (capped). Returns the new value, or None if unchanged"""
        if self.state.terminal:
            return None
        new = min(self.progress_cap, max(self.progress, value))
        if new == self.progress:
            return None
        self.progress = new
        return new


def error_message(error: Exception) -> str:
    message = str(error) or type(error).__name__
    if isinstance(error, (ValueError, RuntimeError)):
        return message
    return f"Analysis failed: {message}"


class AnalysisRelay:
    """
    Event-stream wrapper around AnalysisPipeline.

    Args:
        pipeline: the analysis chain to run, once per stream
        config: timer intervals and progress bounds
    """

    def __init__(self, pipeline: AnalysisPipeline, config: RelayConfig):
        self.pipeline = pipeline
        self.config = config
        # Pipelines keep running after a client disconnects; hold a reference until they finish
        self._workers: Set[asyncio.Task] = set()

    async def stream(self, url: str, mode: str = "free") -> AsyncIterator[str]:
        """Yield SSE frames for one analysis, ending right after the terminal event"""
        run = RelayRun(self.config.progress_cap)
        try:
            url = normalize_url(url)
        except InvalidURLError as e:
            # rejected before any timer or I/O starts
            run.advance(AnalysisState.FAILED)
            logger.warning(f"⚠️ Stream rejected: {e}")
            yield sse_event("error", {"message": str(e), "progress": 100})
            return

        queue: asyncio.Queue = asyncio.Queue()
        loop = asyncio.get_running_loop()

        def enter_state(state: AnalysisState):
            if run.state.terminal:
                return
            run.advance(state)
            value = run.raise_progress(STATE_PROGRESS_FLOOR.get(state, 0))
            if value is not None:
                queue.put_nowait(("progress", {"value": value}))

        def on_state(state: AnalysisState):
            # Called from the pipeline's worker thread
            loop.call_soon_threadsafe(enter_state, state)

        async def work():
            try:
                result = await asyncio.to_thread(self.pipeline.run, url, mode, on_state)
            except Exception as e:
                logger.error(f"❌ Stream analysis failed for {url}: {e}")
                queue.put_nowait(("error", {"message": error_message(e), "progress": 100}))
            else:
                payload = result.report.model_dump(mode="json")
                payload["progress"] = 100
                queue.put_nowait(("result", payload))

        logger.info(f"🚀 Stream started for {url} (mode={mode})")
        worker = asyncio.create_task(work())
        self._workers.add(worker)
        worker.add_done_callback(self._workers.discard)
        ticker = asyncio.create_task(self._tick(run, queue))
        heartbeat = asyncio.create_task(self._heartbeat(queue))

        try:
            while True:
                event, data = await queue.get()
                if event in TERMINAL_EVENTS:
                    run.advance(AnalysisState.DONE if event == "result" else AnalysisState.FAILED)
                    logger.info(f"✅ Stream for {url} ended with '{event}'")
                    yield sse_event(event, data)
                    break
                yield sse_event(event, data)
        finally:
            ticker.cancel()
            heartbeat.cancel()
            if not run.state.terminal:
                logger.warning(f"⚠️ Client left stream for {url} in state {run.state.value}")

    async def _tick(self, run: RelayRun, queue: asyncio.Queue):
        while True:
            await asyncio.sleep(self.config.tick_seconds)
            value = run.raise_progress(run.progress + self.config.tick_step)
            if value is not None:
                queue.put_nowait(("progress", {"value": value}))

    async def _heartbeat(self, queue: asyncio.Queue):
        while True:
            await asyncio.sleep(self.config.heartbeat_seconds)
            queue.put_nowait(("ping", {"t": int(time.time() * 1000)}))
