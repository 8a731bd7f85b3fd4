from collections.abc import Awaitable, Callable
from typing import Any

from fastmcp.utilities.logging import get_logger
from mcp.shared.version import SUPPORTED_PROTOCOL_VERSIONS
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    LATEST_PROTOCOL_VERSION,
    METHOD_NOT_FOUND,
    CallToolRequestParams,
    CallToolResult,
    EmptyResult,
    ErrorData,
    Implementation,
    InitializeRequestParams,
    InitializeResult,
    JSONRPCError,
    JSONRPCMessage,
    JSONRPCNotification,
    JSONRPCRequest,
    JSONRPCResponse,
    ListToolsResult,
    RequestId,
    Result,
    ServerCapabilities,
    TextContent,
    Tool,
    ToolsCapability,
)
from pydantic import ValidationError
from pydantic_core import to_json

from lovable_mcp.servers.dispatcher import CapabilityRequest, CapabilityResult, Dispatcher, ResultOutcome
from lovable_mcp.servers.registry import Capability, CapabilityRegistry

logger = get_logger(__name__)

SERVER_NAME = "lovable-mcp-server"
SERVER_VERSION = "1.0.0"

SERVER_INSTRUCTIONS = (
    "Tools for inspecting and editing Lovable.dev projects through the GitHub repositories they sync to. "
    "Read a file before updating or deleting it. A ConflictOrStale error means the file changed since it was read."
)


def capability_to_tool(capability: Capability[Any]) -> Tool:
    return Tool(name=capability.name, description=capability.description, inputSchema=capability.input_schema())


def to_call_tool_result(result: CapabilityResult) -> CallToolResult:
    """Failures and partial successes are ordinary results with isError set, so the model can read what went wrong."""

    if result.failure:
        text = to_json({"error": result.failure.model_dump(mode="json")}, indent=2).decode("utf-8")
    else:
        text = result.text or ""

    return CallToolResult(
        content=[TextContent(type="text", text=text)],
        isError=result.is_error,
        _meta={"outcome": result.outcome.value} if result.outcome == ResultOutcome.PARTIAL_SUCCESS else None,
    )


def error_response(request_id: RequestId, code: int, message: str) -> JSONRPCMessage:
    return JSONRPCMessage(JSONRPCError(jsonrpc="2.0", id=request_id, error=ErrorData(code=code, message=message)))


class McpProtocolHandler:
    """Answers the JSON-RPC messages of the Model Context Protocol that a tools-only server has to support."""

    registry: CapabilityRegistry
    dispatcher: Dispatcher

    _methods: dict[str, Callable[[dict[str, Any]], Awaitable[Result]]]

    def __init__(self, registry: CapabilityRegistry, dispatcher: Dispatcher):
        self.registry = registry
        self.dispatcher = dispatcher
        self._methods = {
            "initialize": self.initialize,
            "ping": self.ping,
            "tools/list": self.list_tools,
            "tools/call": self.call_tool,
        }

    async def handle(self, message: JSONRPCMessage) -> JSONRPCMessage | None:
        """Handle one inbound message. Returns the response to send, or None for notifications."""

        match message.root:
            case JSONRPCRequest() as request:
                return await self._handle_request(request)
            case JSONRPCNotification() as notification:
                logger.debug(f"Received notification {notification.method}")
                return None
            case JSONRPCResponse() | JSONRPCError():
                # The server never sends requests, so there is nothing waiting for a response
                return None

    async def _handle_request(self, request: JSONRPCRequest) -> JSONRPCMessage:
        if not (method := self._methods.get(request.method)):
            return error_response(request.id, METHOD_NOT_FOUND, f"Method not found: {request.method}")

        try:
            result = await method(request.params or {})
        except ValidationError as e:
            return error_response(request.id, INVALID_PARAMS, f"Invalid params for {request.method}: {e.error_count()} errors")
        except Exception:
            logger.exception(f"Unexpected error handling {request.method}")
            return error_response(request.id, INTERNAL_ERROR, f"Internal error handling {request.method}")

        return JSONRPCMessage(
            JSONRPCResponse(jsonrpc="2.0", id=request.id, result=result.model_dump(by_alias=True, mode="json", exclude_none=True))
        )

    async def initialize(self, params: dict[str, Any]) -> InitializeResult:
        initialize_params = InitializeRequestParams.model_validate(params)

        requested_version = str(initialize_params.protocolVersion)
        protocol_version = requested_version if requested_version in SUPPORTED_PROTOCOL_VERSIONS else LATEST_PROTOCOL_VERSION

        logger.info(f"Initializing session for {initialize_params.clientInfo.name} with protocol version {protocol_version}")

        return InitializeResult(
            protocolVersion=protocol_version,
            capabilities=ServerCapabilities(tools=ToolsCapability(listChanged=False)),
            serverInfo=Implementation(name=SERVER_NAME, version=SERVER_VERSION),
            instructions=SERVER_INSTRUCTIONS,
        )

    async def ping(self, params: dict[str, Any]) -> EmptyResult:  # noqa: ARG002
        return EmptyResult()

    async def list_tools(self, params: dict[str, Any]) -> ListToolsResult:  # noqa: ARG002
        return ListToolsResult(tools=[capability_to_tool(capability) for capability in self.registry.capabilities()])

    async def call_tool(self, params: dict[str, Any]) -> CallToolResult:
        call_params = CallToolRequestParams.model_validate(params)

        result = await self.dispatcher.dispatch(CapabilityRequest(capability_name=call_params.name, arguments=call_params.arguments or {}))

        return to_call_tool_result(result)
