"""
Session Tracker - Live cadence state machine.

Consumes cumulative step counts while tracking, derives the
instantaneous cadence, keeps a bounded smoothing window and finalizes
an average cadence when the session stops.

States:
- IDLE: initial; step updates are ignored
- TRACKING: step updates are applied
"""
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Deque, Optional, Tuple

from cadence.core.errors import NetworkSaveError, SensorUpdateError
from cadence.core.logging import get_logger
from cadence.models.schemas import FinishedSession, format_iso, utc_now
from cadence.services.tracking.sinks import SaveResult, SessionSink

logger = get_logger(__name__)

WINDOW_SIZE = 10


class TrackerState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"


@dataclass(frozen=True)
class CadenceReading:
    """One instantaneous cadence value in the smoothing window."""
    timestamp_millis: int
    instantaneous_cadence: float


@dataclass(frozen=True)
class StepCountSample:
    """A motion sensor sample; `error` is set when the sensor failed."""
    steps: Optional[int]
    timestamp: datetime
    error: Optional[str] = None


class SessionTracker:
    """
    Tracks one cadence session at a time.

    Observable state (current_cadence, average_cadence, total_steps,
    is_tracking) is read by the presentation layer. All mutations must
    come from a single delivery path, see SampleChannel.

    Usage:
        tracker = SessionTracker(sink=HttpSessionSink())
        tracker.start_tracking()
        tracker.on_step_count_update(120)
        result = await tracker.stop_tracking()
    """

    def __init__(
        self,
        sink: Optional[SessionSink] = None,
        clock: Callable[[], datetime] = utc_now,
        window_size: int = WINDOW_SIZE,
    ):
        self._sink = sink
        self._clock = clock
        self._state = TrackerState.IDLE
        self._start_time: Optional[datetime] = None
        self._readings: Deque[CadenceReading] = deque(maxlen=window_size)

        self.current_cadence: float = 0.0
        self.average_cadence: float = 0.0
        self.total_steps: int = 0
        self.last_save: Optional[SaveResult] = None

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_tracking(self) -> bool:
        return self._state is TrackerState.TRACKING

    @property
    def readings(self) -> Tuple[CadenceReading, ...]:
        """Snapshot of the smoothing window, oldest first."""
        return tuple(self._readings)

    def start_tracking(self, now: Optional[datetime] = None) -> bool:
        """
        Begin a new session.

        Returns:
            False if a session is already being tracked
        """
        if self.is_tracking:
            return False

        self._start_time = now or self._clock()
        self._state = TrackerState.TRACKING
        self._readings.clear()
        self.total_steps = 0
        self.current_cadence = 0.0

        logger.info("Cadence tracking started", start_time=format_iso(self._start_time))
        return True

    def on_step_count_update(self, cumulative_steps: int, now: Optional[datetime] = None) -> bool:
        """
        Apply a cumulative step count reported by the sensor.

        Returns:
            True if the update changed the tracker state
        """
        if not self.is_tracking or self._start_time is None:
            return False

        now = now or self._clock()
        elapsed = (now - self._start_time).total_seconds()
        # Clock skew or a duplicate callback right at session start
        if elapsed <= 0:
            logger.debug("Discarding step update with non-positive elapsed time", elapsed=elapsed)
            return False

        steps_per_minute = (cumulative_steps / elapsed) * 60.0
        self.current_cadence = steps_per_minute
        self._readings.append(
            CadenceReading(
                timestamp_millis=int(now.timestamp() * 1000),
                instantaneous_cadence=steps_per_minute,
            )
        )
        self.total_steps = cumulative_steps
        return True

    def handle_sample(self, sample: StepCountSample) -> bool:
        """Apply a sensor sample, dropping samples that carry an error."""
        if sample.error is not None:
            error = SensorUpdateError(sample.error)
            logger.warning("Sensor update error, sample dropped", error=str(error))
            return False
        if sample.steps is None:
            return False
        return self.on_step_count_update(sample.steps, sample.timestamp)

    def finish_tracking(self, now: Optional[datetime] = None) -> Optional[FinishedSession]:
        """
        Leave the tracking state and build the finished session.

        Returns:
            The finished session, or None if nothing was being tracked
        """
        if not self.is_tracking or self._start_time is None:
            return None

        now = now or self._clock()
        self._state = TrackerState.IDLE

        # No positive reading keeps the previous average
        positive = [r.instantaneous_cadence for r in self._readings if r.instantaneous_cadence > 0]
        if positive:
            self.average_cadence = sum(positive) / len(positive)

        session = FinishedSession(
            timestamp=format_iso(now),
            averageCadence=self.average_cadence,
            totalSteps=self.total_steps,
            duration=max(0.0, (now - self._start_time).total_seconds()),
        )

        logger.info(
            "Cadence session completed",
            average_cadence=round(session.averageCadence, 2),
            total_steps=session.totalSteps,
            duration=session.formatted_duration,
        )
        return session

    async def stop_tracking(self, now: Optional[datetime] = None) -> Optional[SaveResult]:
        """
        Stop the session and save it once.

        A failed save is logged and dropped; the tracker stays idle.

        Returns:
            The save outcome, or None if nothing was being tracked
        """
        session = self.finish_tracking(now)
        if session is None:
            return None

        result = await self._save(session)
        self.last_save = result
        return result

    async def _save(self, session: FinishedSession) -> SaveResult:
        if self._sink is None:
            result = SaveResult.failure(NetworkSaveError("No session sink configured"))
        else:
            result = await self._sink.save(session)

        if result.ok:
            record_id = result.record.get("id") if result.record else None
            logger.info("Cadence session saved", record_id=record_id)
        else:
            logger.error("Cadence session not saved", error=str(result.error))
        return result
