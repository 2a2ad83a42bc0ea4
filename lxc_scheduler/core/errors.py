# lxc_scheduler/core/errors.py

# -----------------------------
# Base Errors
# -----------------------------

class SchedulerError(Exception):
    """Base class for all scheduler errors."""
    status_code = 500


# -----------------------------
# Validation / Domain Errors
# -----------------------------

class BadInput(SchedulerError):
    """Malformed request, missing field or unknown status value."""
    status_code = 400


class PlacementFailed(SchedulerError):
    """The host named by the metrics source is not registered."""
    status_code = 400


class NotFound(SchedulerError):
    status_code = 404


class InvalidTransition(SchedulerError):
    """Illegal container status change attempted."""
    status_code = 409


class Conflict(SchedulerError):
    """Uniqueness violated (host name/ip, service port pair)."""
    status_code = 409


# -----------------------------
# Persistence Errors
# -----------------------------

class StorageError(SchedulerError):
    status_code = 500


# -----------------------------
# Collaborator Errors
# -----------------------------

class MetricsUnavailable(SchedulerError):
    """Metrics source cannot name a host."""
    status_code = 503


class AgentError(SchedulerError):
    """Host agent call failed."""
    status_code = 502


class AgentTransportError(AgentError):
    """Connection refused, reset or timed out."""
    pass


class AgentResponseError(AgentError):
    """Agent answered with a non-2xx status."""

    def __init__(self, message: str, response_status: int):
        super().__init__(message)
        self.response_status = response_status


class AgentDecodeError(AgentError):
    """Agent body is not a valid operation document."""
    pass
