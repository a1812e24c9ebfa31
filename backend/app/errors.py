"""
Error taxonomy for the intake workflows.

ValidationError    : bad inbound data, raised before any remote call
GatewayError       : a remote platform answered with a failure or userErrors
TransportError     : network-level failure talking to a remote platform
NotificationError  : the mail platform rejected a send
ConfigurationError : required secrets missing at process start
WorkflowFailed     : a workflow halted part-way through its remote chain
"""

from typing import Any, Optional


class IntakeError(Exception):
    """Base class for all intake service errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(IntakeError):
    """Inbound data rejected before anything was sent upstream."""


class GatewayError(IntakeError):
    """
    A remote call returned non-success.

    ``errors`` carries the raw error list (GraphQL ``errors`` or a mutation's
    ``userErrors``) so it can be logged verbatim.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[list[Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.errors = errors or []
        self.status_code = status_code


class TransportError(GatewayError):
    """Network-level failure (connect, read, timeout) on an outbound call."""


class NotificationError(GatewayError):
    """The mail platform refused to send a message."""


class ConfigurationError(IntakeError):
    """Required configuration is missing."""


class WorkflowFailed(IntakeError):
    """
    A workflow stopped at ``stage``.

    ``completed`` lists the stages whose remote side effects already landed,
    in order. Nothing is rolled back; this is what an operator needs to
    reconcile by hand.
    """

    def __init__(self, stage: str, cause: Exception, completed: list[str]):
        super().__init__(f"{stage} failed: {cause}")
        self.stage = stage
        self.cause = cause
        self.completed = list(completed)
