import asyncio
import contextlib
from collections.abc import AsyncGenerator, AsyncIterator

import anyio
from fastmcp.utilities.logging import get_logger
from mcp.types import JSONRPCMessage
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response, StreamingResponse
from starlette.routing import Route

from lovable_mcp.servers.protocol import SERVER_VERSION, McpProtocolHandler
from lovable_mcp.servers.registry import CapabilityRegistry
from lovable_mcp.servers.sessions import Session, SessionTable
from lovable_mcp.servers.shared.errors import SessionNotFoundError
from lovable_mcp.settings import DEFAULT_KEEPALIVE_INTERVAL_SECONDS, DEFAULT_SESSION_IDLE_TIMEOUT_SECONDS

logger = get_logger(__name__)

SSE_PATH = "/sse"
MESSAGES_PATH = "/messages"
HEALTH_PATH = "/health"

KEEPALIVE_FRAME = ": keepalive\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

CORS_ALLOW_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization", "Mcp-Session-Id", "Accept"]
CORS_EXPOSE_HEADERS = ["Mcp-Session-Id"]


def sse_event(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


class SseTransport:
    """Serves MCP over Server-Sent Events.

    A client opens a stream with `GET /sse`, receives the URL to post its messages to as the first event, and then
    receives every response on the stream. Messages are posted to `POST /messages?sessionId=<id>` and acknowledged
    with `202 Accepted` before they are processed.
    """

    sessions: SessionTable
    protocol: McpProtocolHandler
    registry: CapabilityRegistry
    owner: str
    keepalive_interval: float
    session_idle_timeout: float

    _tasks: set[asyncio.Task[None]]

    def __init__(
        self,
        sessions: SessionTable,
        protocol: McpProtocolHandler,
        registry: CapabilityRegistry,
        owner: str,
        keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL_SECONDS,
        session_idle_timeout: float = DEFAULT_SESSION_IDLE_TIMEOUT_SECONDS,
    ):
        self.sessions = sessions
        self.protocol = protocol
        self.registry = registry
        self.owner = owner
        self.keepalive_interval = keepalive_interval
        self.session_idle_timeout = session_idle_timeout
        self._tasks = set()

    async def sse(self, request: Request) -> Response:  # noqa: ARG002
        return StreamingResponse(self._stream(), media_type="text/event-stream", headers=SSE_HEADERS)

    async def _stream(self) -> AsyncGenerator[str, None]:
        # Created on first iteration so a response that never starts leaves nothing in the table
        session = await self.sessions.create()

        try:
            yield sse_event("endpoint", f"{MESSAGES_PATH}?sessionId={session.session_id}")

            while session.is_open:
                try:
                    message = await session.next_message(timeout=self.keepalive_interval)
                except TimeoutError:
                    if session.idle_for() > self.session_idle_timeout:
                        logger.info(f"Session {session.session_id} idle for {session.idle_for():.0f}s, closing")
                        break

                    yield KEEPALIVE_FRAME
                    continue

                if message is None:
                    break

                yield sse_event("message", message.model_dump_json(by_alias=True, exclude_none=True))
        finally:
            # The stream may be torn down by a cancelled task, removal must still complete
            with anyio.CancelScope(shield=True):
                _ = await self.sessions.remove(session.session_id)

    async def messages(self, request: Request) -> Response:
        if not (session_id := request.query_params.get("sessionId")):
            return JSONResponse({"error": "Missing sessionId"}, status_code=400)

        session = self.sessions.lookup(session_id)

        if session is None or not session.is_open:
            logger.warning(str(SessionNotFoundError(session_id=session_id)))
            return JSONResponse({"error": "Session not found"}, status_code=404)

        body = await request.body()

        try:
            message = JSONRPCMessage.model_validate_json(body)
        except ValidationError as e:
            logger.warning(f"Rejected invalid message for session {session_id}: {e.error_count()} errors")
            return JSONResponse({"error": "Invalid JSON-RPC message"}, status_code=400)

        session.touch()

        task = asyncio.create_task(self._process(session=session, message=message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        return Response("Accepted", status_code=202)

    async def _process(self, session: Session, message: JSONRPCMessage) -> None:
        try:
            response = await self.protocol.handle(message)
        except Exception:
            logger.exception(f"Unexpected error processing a message for session {session.session_id}")
            return

        if response is not None and not session.send(response):
            logger.debug(f"Session {session.session_id} closed before its response was ready, discarding it")

    async def health(self, request: Request) -> Response:  # noqa: ARG002
        return JSONResponse({"status": "ok", "sessions": self.sessions.count(), "version": SERVER_VERSION, "owner": self.owner})

    async def root(self, request: Request) -> Response:  # noqa: ARG002
        return JSONResponse(
            {
                "name": "Lovable MCP Server",
                "version": SERVER_VERSION,
                "description": "MCP server for Lovable.dev via GitHub integration",
                "endpoints": {"sse": SSE_PATH, "messages": MESSAGES_PATH, "health": HEALTH_PATH},
                "tools": self.registry.names(),
            }
        )

    async def shutdown(self) -> None:
        await self.sessions.close_all()

        for task in list(self._tasks):
            _ = task.cancel()

        if self._tasks:
            _ = await asyncio.gather(*self._tasks, return_exceptions=True)

    def routes(self) -> list[Route]:
        return [
            Route(SSE_PATH, self.sse, methods=["GET"]),
            Route(MESSAGES_PATH, self.messages, methods=["POST"]),
            Route(HEALTH_PATH, self.health, methods=["GET"]),
            Route("/", self.root, methods=["GET"]),
        ]

    def create_app(self) -> Starlette:
        @contextlib.asynccontextmanager
        async def lifespan(_: Starlette) -> AsyncIterator[None]:
            yield
            await self.shutdown()

        return Starlette(
            routes=self.routes(),
            middleware=[
                Middleware(
                    CORSMiddleware,
                    allow_origins=["*"],
                    allow_methods=CORS_ALLOW_METHODS,
                    allow_headers=CORS_ALLOW_HEADERS,
                    expose_headers=CORS_EXPOSE_HEADERS,
                )
            ],
            lifespan=lifespan,
        )
