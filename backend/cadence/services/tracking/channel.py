"""
Sample Channel - Single-consumer queue between the sensor and the tracker.

Sensor callbacks publish samples without waiting; one consumer task
applies them to the tracker in arrival order, so no two updates ever
interleave. Publish from the event loop thread; sensor threads should use
loop.call_soon_threadsafe(channel.publish, sample).
"""
import asyncio
from datetime import datetime
from typing import Optional

from cadence.core.logging import get_logger
from cadence.models.schemas import utc_now
from cadence.services.tracking.tracker import SessionTracker, StepCountSample

logger = get_logger(__name__)


class SampleChannel:
    """Fire-and-forget sample delivery into a SessionTracker."""

    def __init__(self, maxsize: int = 0):
        self._queue: "asyncio.Queue[Optional[StepCountSample]]" = asyncio.Queue(maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, sample: StepCountSample) -> bool:
        """
        Queue a sample without blocking.

        Returns:
            False if the sample was dropped (channel closed or full)
        """
        if self._closed:
            return False
        try:
            self._queue.put_nowait(sample)
        except asyncio.QueueFull:
            logger.warning("Sample channel full, dropping sample", steps=sample.steps)
            return False
        return True

    def publish_steps(self, steps: int, timestamp: Optional[datetime] = None) -> bool:
        return self.publish(StepCountSample(steps=steps, timestamp=timestamp or utc_now()))

    def publish_error(self, message: str, timestamp: Optional[datetime] = None) -> bool:
        return self.publish(StepCountSample(steps=None, timestamp=timestamp or utc_now(), error=message))

    def close(self) -> None:
        """
        Stop the consumer after the samples already queued.

        On a full bounded channel the oldest queued sample is dropped to
        make room for the stop marker.
        """
        if self._closed:
            return
        self._closed = True
        while True:
            try:
                self._queue.put_nowait(None)
                return
            except asyncio.QueueFull:
                dropped = self._queue.get_nowait()
                self._queue.task_done()
                logger.warning(
                    "Sample channel full on close, dropping sample",
                    steps=dropped.steps if dropped is not None else None,
                )

    async def run(self, tracker: SessionTracker) -> int:
        """
        Consume samples until the channel is closed.

        Returns:
            Number of samples that changed tracker state
        """
        applied = 0
        while True:
            sample = await self._queue.get()
            try:
                if sample is None:
                    break
                if tracker.handle_sample(sample):
                    applied += 1
            finally:
                self._queue.task_done()
        logger.debug("Sample channel consumer stopped", applied=applied)
        return applied
