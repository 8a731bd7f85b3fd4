import time
from enum import StrEnum
from typing import Any, Self

from fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, Field, ValidationError
from pydantic_core import ErrorDetails

from lovable_mcp.clients.errors.github import ClientError, ConflictError, UpstreamTimeoutError
from lovable_mcp.servers.models.project import SagaOutcome
from lovable_mcp.servers.registry import CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.shared.errors import FailureKind, InvalidArgumentsError, ServerError, UnknownCapabilityError
from lovable_mcp.servers.shared.utility import to_text

logger = get_logger(__name__)


class CapabilityRequest(BaseModel):
    capability_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class ResultOutcome(StrEnum):
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILURE = "failure"


class Failure(BaseModel):
    kind: FailureKind
    message: str
    retryable: bool = False


class CapabilityResult(BaseModel):
    """The single terminal outcome of a capability request."""

    outcome: ResultOutcome
    text: str | None = None
    failure: Failure | None = None

    @classmethod
    def success(cls, text: str) -> Self:
        return cls(outcome=ResultOutcome.SUCCESS, text=text)

    @classmethod
    def partial_success(cls, text: str) -> Self:
        return cls(outcome=ResultOutcome.PARTIAL_SUCCESS, text=text)

    @classmethod
    def failed(cls, kind: FailureKind, message: str, retryable: bool = False) -> Self:
        return cls(outcome=ResultOutcome.FAILURE, failure=Failure(kind=kind, message=message, retryable=retryable))

    @property
    def is_error(self) -> bool:
        return self.outcome != ResultOutcome.SUCCESS


def describe_validation_error(error: ErrorDetails) -> str:
    location = ".".join(str(part) for part in error["loc"]) or "arguments"
    return f"{location}: {error['msg']}"


def classify_exception(exception: Exception) -> Failure:
    """Map an exception raised by a handler onto the failure taxonomy reported to clients."""

    match exception:
        case ConflictError():
            return Failure(kind=FailureKind.CONFLICT_OR_STALE, message=str(exception), retryable=True)
        case UpstreamTimeoutError():
            return Failure(kind=FailureKind.UPSTREAM_TIMEOUT, message=str(exception), retryable=True)
        case ClientError():
            return Failure(kind=FailureKind.UPSTREAM_FAILURE, message=str(exception))
        case ServerError():
            return Failure(kind=exception.kind, message=str(exception))
        case _:
            return Failure(kind=FailureKind.INTERNAL_ERROR, message=f"{type(exception).__name__}: {exception}")


class Dispatcher:
    """Resolves, validates and executes capability requests. Never raises: every request ends in a CapabilityResult."""

    registry: CapabilityRegistry
    context: ExecutionContext

    def __init__(self, registry: CapabilityRegistry, context: ExecutionContext):
        self.registry = registry
        self.context = context

    async def dispatch(self, request: CapabilityRequest) -> CapabilityResult:
        started = time.perf_counter()

        result = await self._dispatch(request)

        elapsed_ms = (time.perf_counter() - started) * 1000

        if result.failure:
            logger.info(f"Capability {request.capability_name} failed after {elapsed_ms:.0f}ms: {result.failure.kind}")
        else:
            logger.info(f"Capability {request.capability_name} completed in {elapsed_ms:.0f}ms: {result.outcome}")

        return result

    async def _dispatch(self, request: CapabilityRequest) -> CapabilityResult:
        name = request.capability_name

        if not (capability := self.registry.resolve(name)):
            error = UnknownCapabilityError(name=name)
            return CapabilityResult.failed(kind=error.kind, message=str(error))

        try:
            arguments = capability.arguments_model.model_validate(request.arguments)
        except ValidationError as e:
            error = InvalidArgumentsError(name=name, problems=[describe_validation_error(detail) for detail in e.errors()])
            return CapabilityResult.failed(kind=error.kind, message=str(error))

        try:
            output = await capability.handler(arguments, self.context)  # pyright: ignore[reportAny]
            text = to_text(output)
        except Exception as e:
            failure = classify_exception(e)

            if failure.kind == FailureKind.INTERNAL_ERROR:
                logger.exception(f"Unexpected error in capability {name}")
            else:
                logger.warning(f"Capability {name} failed: {e}")

            return CapabilityResult(outcome=ResultOutcome.FAILURE, failure=failure)

        if isinstance(output, SagaOutcome) and output.is_partial:
            return CapabilityResult.partial_success(text=text)

        return CapabilityResult.success(text=text)
