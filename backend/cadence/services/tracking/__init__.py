"""
Tracking module - Live cadence computation on the client side.

This module provides:
- SessionTracker state machine
- SampleChannel feeding sensor samples to the tracker
- Session sinks that persist finished sessions
"""
from cadence.services.tracking.channel import SampleChannel
from cadence.services.tracking.sinks import (
    HttpSessionSink,
    SaveResult,
    SessionSink,
    StoreSessionSink,
)
from cadence.services.tracking.tracker import (
    WINDOW_SIZE,
    CadenceReading,
    SessionTracker,
    StepCountSample,
    TrackerState,
)

__all__ = [
    "SessionTracker",
    "TrackerState",
    "CadenceReading",
    "StepCountSample",
    "WINDOW_SIZE",
    "SampleChannel",
    "SessionSink",
    "StoreSessionSink",
    "HttpSessionSink",
    "SaveResult",
]
