from logging import Logger
from typing import Literal

import click
import uvicorn
from fastmcp.utilities.logging import configure_logging, get_logger
from starlette.applications import Starlette

from lovable_mcp.clients.github import GitHubClient, get_githubkit_client
from lovable_mcp.servers.dispatcher import Dispatcher
from lovable_mcp.servers.protocol import McpProtocolHandler
from lovable_mcp.servers.registry import CapabilityRegistry, ExecutionContext
from lovable_mcp.servers.sessions import SessionTable
from lovable_mcp.servers.tools import analysis, build, collaboration, config_files, files, folders, history, projects, search
from lovable_mcp.servers.transport import SseTransport
from lovable_mcp.settings import ServerSettings

logger: Logger = get_logger(name=__name__)

TOOL_MODULES = (projects, files, history, collaboration, search, folders, config_files, analysis, build)

GRACEFUL_SHUTDOWN_SECONDS = 5


def build_registry() -> CapabilityRegistry:
    """Register every capability and freeze the registry. A duplicate name aborts startup."""

    registry = CapabilityRegistry()

    for module in TOOL_MODULES:
        _ = module.register_tools(registry=registry)

    registry.freeze()

    return registry


def create_app(settings: ServerSettings, github_client: GitHubClient | None = None) -> Starlette:
    github_client = github_client or GitHubClient(
        githubkit_client=get_githubkit_client(token=settings.github_token, timeout=settings.upstream_timeout_seconds),
        logger=logger,
        timeout=settings.upstream_timeout_seconds,
        max_concurrent_requests=settings.max_concurrent_upstream_requests,
    )

    registry = build_registry()

    dispatcher = Dispatcher(registry=registry, context=ExecutionContext(github_client=github_client, owner=settings.github_owner))

    transport = SseTransport(
        sessions=SessionTable(),
        protocol=McpProtocolHandler(registry=registry, dispatcher=dispatcher),
        registry=registry,
        owner=settings.github_owner,
        keepalive_interval=settings.keepalive_interval_seconds,
        session_idle_timeout=settings.session_idle_timeout_seconds,
    )

    return transport.create_app()


@click.command()
@click.option("--host", default=None, help="The address to bind to. Defaults to $HOST or 0.0.0.0")
@click.option("--port", type=int, default=None, help="The port to listen on. Defaults to $PORT or 3000")
@click.option("--owner", default=None, help="The GitHub account whose Lovable projects are served. Defaults to $GITHUB_OWNER")
@click.option("--upstream-timeout", type=float, default=None, help="Seconds to wait for GitHub before failing a call")
@click.option("--max-concurrent-upstream-requests", type=int, default=None, help="The most GitHub calls to have in flight at once")
@click.option("--session-idle-timeout", type=float, default=None, help="Seconds without messages before a stream is closed")
@click.option("--keepalive-interval", type=float, default=None, help="Seconds between keepalive comments on idle streams")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    help="The log level",
)
def run_server(
    host: str | None,
    port: int | None,
    owner: str | None,
    upstream_timeout: float | None,
    max_concurrent_upstream_requests: int | None,
    session_idle_timeout: float | None,
    keepalive_interval: float | None,
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"],
):
    configure_logging(level=log_level)

    try:
        settings = ServerSettings.from_env(
            host=host,
            port=port,
            github_owner=owner,
            upstream_timeout_seconds=upstream_timeout,
            max_concurrent_upstream_requests=max_concurrent_upstream_requests,
            session_idle_timeout_seconds=session_idle_timeout,
            keepalive_interval_seconds=keepalive_interval,
        )
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    logger.info(f"Lovable MCP Server running on {settings.host}:{settings.port} for GitHub owner {settings.github_owner}")

    uvicorn.run(
        create_app(settings=settings),
        host=settings.host,
        port=settings.port,
        log_level=log_level.lower(),
        timeout_graceful_shutdown=GRACEFUL_SHUTDOWN_SECONDS,
    )


if __name__ == "__main__":
    run_server()
