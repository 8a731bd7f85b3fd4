from enum import StrEnum

ExtraInfoType = dict[str, str | None]


class FailureKind(StrEnum):
    """The classification reported to clients for a failed capability call."""

    UNKNOWN_CAPABILITY = "UnknownCapability"
    INVALID_ARGUMENTS = "InvalidArguments"
    SESSION_NOT_FOUND = "SessionNotFound"
    UPSTREAM_FAILURE = "UpstreamFailure"
    UPSTREAM_TIMEOUT = "UpstreamTimeout"
    CONFLICT_OR_STALE = "ConflictOrStale"
    PARTIAL_SUCCESS = "PartialSuccess"
    INTERNAL_ERROR = "InternalError"


class ServerError(Exception):
    """A request error from the Lovable MCP server."""

    kind: FailureKind = FailureKind.INTERNAL_ERROR

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class UnknownCapabilityError(ServerError):
    kind = FailureKind.UNKNOWN_CAPABILITY

    def __init__(self, name: str):
        super().__init__(message=f"Unknown capability: {name}")


class InvalidArgumentsError(ServerError):
    """The arguments did not match the capability's input schema."""

    kind = FailureKind.INVALID_ARGUMENTS

    problems: list[str]

    def __init__(self, name: str, problems: list[str]):
        self.problems = problems
        super().__init__(message=f"Invalid arguments for {name}: " + "; ".join(problems))


class SessionNotFoundError(ServerError):
    kind = FailureKind.SESSION_NOT_FOUND

    def __init__(self, session_id: str):
        super().__init__(message="Session not found", extra_info={"session_id": session_id})


class DuplicateCapabilityError(ServerError):
    def __init__(self, name: str):
        super().__init__(message=f"A capability named {name} is already registered")


class RegistryFrozenError(ServerError):
    def __init__(self, name: str):
        super().__init__(message=f"Cannot register {name}, the capability registry is frozen")
