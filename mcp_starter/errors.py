"""Error taxonomy for registry and invocation failures."""

from enum import Enum


class ErrorKind(str, Enum):
    """Failure kinds reported back to the caller."""
    NOT_FOUND = "not_found"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"
    INVALID_ARGUMENT = "invalid_argument"
    UNSUPPORTED = "unsupported"
    INTERNAL_ERROR = "internal_error"
    CANCELLED = "cancelled"


class InvocationError(Exception):
    """Base class for every error the dispatcher turns into a Failure."""

    kind = ErrorKind.INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(InvocationError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, category, identifier: str):
        super().__init__(f"Unknown {category.value}: {identifier}")
        self.category = category
        self.identifier = identifier


class DuplicateIdentifier(InvocationError):
    kind = ErrorKind.DUPLICATE_IDENTIFIER

    def __init__(self, category, identifier: str):
        super().__init__(f"{category.value.capitalize()} '{identifier}' is already registered")
        self.category = category
        self.identifier = identifier


class InvalidArgument(InvocationError):
    kind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, parameter: str, expected: str, detail: str | None = None):
        message = f"Invalid argument '{parameter}': expected {expected}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.parameter = parameter
        self.expected = expected


class Unsupported(InvocationError):
    """The calling side does not advertise a capability a handler needs."""
    kind = ErrorKind.UNSUPPORTED

    def __init__(self, capability: str, detail: str | None = None):
        message = f"Client does not support {capability}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.capability = capability
        self.detail = detail


class InternalError(InvocationError):
    kind = ErrorKind.INTERNAL_ERROR


class InvocationCancelled(InvocationError):
    kind = ErrorKind.CANCELLED

    def __init__(self, message: str = "Invocation cancelled"):
        super().__init__(message)
