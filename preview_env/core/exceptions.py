"""
Error taxonomy for the preview environment workflow.

Every fatal condition raised by a component derives from PreviewEnvError so the
entrypoint can report it to the host exactly once.
"""

from typing import Any, List, Optional


class PreviewEnvError(Exception):
    """Base class for all workflow errors."""

    pass


class RemoteAPIError(PreviewEnvError):
    """The Railway API returned an error payload for an operation."""

    def __init__(self, message: str, detail: Any = None, operation: Optional[str] = None):
        super().__init__(message)
        self.detail = detail
        self.operation = operation


class TransportError(RemoteAPIError):
    """Network, timeout, HTTP status or authentication failure."""

    pass


class ConfigurationError(PreviewEnvError):
    """Inputs cannot be resolved into a usable configuration."""

    pass


class IntegrityViolation(PreviewEnvError):
    """Remote state breaks an invariant this workflow relies on."""

    pass


class DeploymentFailed(PreviewEnvError):
    """The watched deployment reached the FAILED status."""

    pass


class UnexpectedResponse(PreviewEnvError):
    """A response did not have the shape the workflow expects."""

    pass


class MonitorTimeout(PreviewEnvError):
    """The deployment did not reach a terminal status in time."""

    pass


class PartialBatchFailure(PreviewEnvError):
    """One or more members of a fan-out batch failed."""

    def __init__(self, reports: List[Any]):
        self.reports = reports
        failed = sum(len(r.failed) for r in reports)
        names = ", ".join(r.name for r in reports if r.failed)
        super().__init__(f"{failed} batch operation(s) failed in: {names}")
