"""
Error Types for Altitude Tracking

Exceptions raised by the session state machine and the exporter. Sensor
problems are not exceptions: an unavailable barometer degrades to GPS-only
altitude and a position failure is recorded as the session's last error.
"""


class TrackerError(Exception):
    """Base class for all altitude tracker errors."""


class InvalidTransition(TrackerError):
    """
    A session transition was requested from a state that does not allow it.

    Attributes:
        action: Name of the requested transition (e.g. "pause").
        state: State the session was in when the request was made.
    """

    def __init__(self, action: str, state) -> None:
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} while session is {getattr(state, 'value', state)}")


class ExportFailure(TrackerError):
    """Writing an export file failed. No partial file was left behind."""
