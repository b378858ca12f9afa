"""Error taxonomy for the nuke engine.

All engine errors share a single ErrorKind enum; the resource type name is
carried as a field rather than encoded in the exception class.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence

from botocore.exceptions import ClientError

# Provider error codes that mean the resource no longer exists
NOT_FOUND_ERROR_CODES = frozenset(
    {
        "NoSuchEntity",
        "NotFound",
        "NotFoundException",
        "ResourceNotFoundException",
        "ResourceNotFoundFault",
        "ServiceNotFoundException",
        "ClusterNotFoundException",
        "InvalidInstanceID.NotFound",
        "InvalidKeyPair.NotFound",
        "InvalidAllocationID.NotFound",
        "InvalidAssociationID.NotFound",
        "InvalidNetworkInterfaceID.NotFound",
        "InvalidPermission.NotFound",
    }
)

PERMISSION_ERROR_CODES = frozenset({"UnauthorizedOperation", "AccessDenied", "AccessDeniedException"})


class ErrorKind(Enum):
    """Kinds of errors produced or classified by the engine."""

    CONFLICTING_SELECTION = "ConflictingSelection"
    INVALID_RESOURCE_TYPE = "InvalidResourceType"
    INVALID_REGION_SELECTION = "InvalidRegionSelection"
    TOO_MANY_RESOURCES = "TooManyResources"
    LIST = "ListError"
    ALREADY_GONE = "AlreadyGone"
    TEARDOWN_STEP = "TeardownStepError"
    DELETE = "DeleteError"
    CONFIRMATION_TIMEOUT = "ConfirmationTimeout"
    CONFIRMATION_FAILED = "ConfirmationFailed"
    UNEXPECTED = "Unexpected"


class NukeError(Exception):
    """Base class for all engine errors."""

    kind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, resource_type: Optional[str] = None) -> None:
        super().__init__(message)
        self.resource_type = resource_type


class PlanError(NukeError):
    """Plan resolution failure; fatal to the whole run."""


class ConflictingSelectionError(PlanError):
    kind = ErrorKind.CONFLICTING_SELECTION

    def __init__(self) -> None:
        super().__init__("Specify resource types to include or to exclude, not both")


class InvalidResourceTypeError(PlanError):
    kind = ErrorKind.INVALID_RESOURCE_TYPE

    def __init__(self, invalid_types: Sequence[str]) -> None:
        self.invalid_types = list(invalid_types)
        super().__init__(f"Invalid resource types specified: {', '.join(self.invalid_types)}")


class InvalidRegionSelectionError(PlanError):
    kind = ErrorKind.INVALID_REGION_SELECTION

    def __init__(self, message: str, invalid_regions: Optional[Sequence[str]] = None) -> None:
        self.invalid_regions = list(invalid_regions or [])
        super().__init__(message)


class TooManyResourcesError(NukeError):
    """Safety ceiling trip; fatal to that resource type's batch only."""

    kind = ErrorKind.TOO_MANY_RESOURCES

    def __init__(self, resource_type: str, count: int, limit: int) -> None:
        self.count = count
        self.limit = limit
        super().__init__(
            f"Too many {resource_type} requested at once ({count} > {limit} limit): "
            "halting to avoid hitting rate limiting",
            resource_type=resource_type,
        )


class ListError(NukeError):
    kind = ErrorKind.LIST

    def __init__(self, resource_type: str, region: str, cause: BaseException) -> None:
        self.region = region
        self.cause = cause
        super().__init__(
            f"{resource_type}: failed to list resources in {region}: {describe_error(cause)}",
            resource_type=resource_type,
        )


class AlreadyGoneError(NukeError):
    """Raised by adapters that detect the resource no longer exists."""

    kind = ErrorKind.ALREADY_GONE


class TeardownStepError(NukeError):
    kind = ErrorKind.TEARDOWN_STEP

    def __init__(self, resource_type: str, step_name: str, step_number: int, cause: BaseException) -> None:
        self.step_name = step_name
        self.step_number = step_number
        self.cause = cause
        super().__init__(
            f"teardown step {step_number} ({step_name}) failed: {describe_error(cause)}",
            resource_type=resource_type,
        )


class DeleteError(NukeError):
    kind = ErrorKind.DELETE

    def __init__(self, resource_type: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(describe_error(cause), resource_type=resource_type)


class ConfirmationTimeoutError(NukeError):
    kind = ErrorKind.CONFIRMATION_TIMEOUT

    def __init__(self, identifier: str, attempts: int, resource_type: Optional[str] = None) -> None:
        self.identifier = identifier
        self.attempts = attempts
        super().__init__(
            f"{identifier} still present after {attempts} confirmation attempts",
            resource_type=resource_type,
        )


class ConfirmationFailedError(NukeError):
    kind = ErrorKind.CONFIRMATION_FAILED

    def __init__(self, identifier: str, resource_type: Optional[str] = None) -> None:
        self.identifier = identifier
        super().__init__(f"{identifier} entered a terminal failure state", resource_type=resource_type)


def error_code(exc: BaseException) -> Optional[str]:
    """Return the provider error code of a botocore ClientError, if any."""
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code")
    return None


def is_already_gone(exc: Optional[BaseException]) -> bool:
    """Check if an error means the resource was already deleted."""
    if exc is None:
        return False
    if isinstance(exc, AlreadyGoneError):
        return True
    if isinstance(exc, (DeleteError, TeardownStepError)):
        return is_already_gone(exc.cause)

    code = error_code(exc)
    if not code:
        return False
    return code in NOT_FOUND_ERROR_CODES or code.endswith(".NotFound") or code.endswith("NotFound")


def error_kind(exc: BaseException) -> ErrorKind:
    if isinstance(exc, NukeError):
        return exc.kind
    if is_already_gone(exc):
        return ErrorKind.ALREADY_GONE
    return ErrorKind.UNEXPECTED


def describe_error(exc: BaseException) -> str:
    """Render a provider or engine error as a short human-readable message.

    Permission and cancellation errors are mapped to fixed markers so the run
    report groups them consistently.
    """
    code = error_code(exc)
    if code in PERMISSION_ERROR_CODES:
        return "error:INSUFFICIENT_PERMISSION"
    if code == "RequestCanceled":
        return "error:EXECUTION_TIMEOUT"
    if code and isinstance(exc, ClientError):
        message = exc.response.get("Error", {}).get("Message", "")
        return f"{code}: {message}" if message else code
    return str(exc) or type(exc).__name__
