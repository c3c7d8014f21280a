from __future__ import annotations

from .models import NormalizationError

UNSUPPORTED_OPTION_REASON = "Unsupported Heartbeat option"
UNKNOWN_MONITOR_TYPE_REASON = "Unsupported monitor type"
INVALID_SCHEDULE_REASON = "Invalid schedule"
NORMALIZATION_FAILED_REASON = "Failed to normalize monitor"

# Trailing sentence of every record error. Clients match on it verbatim.
NOT_SAVED_NOTICE = "You monitor was not created or updated."


class NormalizationFailure(Exception):
    """
    Base exception for record-scoped normalization failures.

    These never abort a batch; the orchestrator turns them into
    NormalizationError entries on the offending record.
    """

    reason: str = NORMALIZATION_FAILED_REASON

    def __init__(self, details: str) -> None:
        super().__init__(details)
        self.details = details

    def to_error(self, monitor_id: str) -> NormalizationError:
        return NormalizationError(id=monitor_id, reason=self.reason, details=self.details)


class UnsupportedOptionError(NormalizationFailure):
    """
    Raised when a monitor uses an option its type/version does not support.
    """

    reason = UNSUPPORTED_OPTION_REASON


class UnknownMonitorTypeError(NormalizationFailure):
    """
    Raised when the declared monitor type has no registered normalizer.
    """

    reason = UNKNOWN_MONITOR_TYPE_REASON


class InvalidScheduleError(NormalizationFailure):
    reason = INVALID_SCHEDULE_REASON


class SchemaConfigurationError(Exception):
    """
    Raised when the schema registry cannot serve a known type/version.

    This is a deployment problem, not bad user input, and is never caught
    per record.
    """

    pass
