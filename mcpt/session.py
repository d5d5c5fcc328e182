"""Session wrapper for driving an MCP server over stdio.

A session spawns the server process, performs the initialize handshake and
takes a one-time snapshot of the tools, resources and prompts the server
declares. Message framing and transport are handled by the ``mcp`` SDK; this
module only orchestrates connect, request and close.

Typical use from a test file::

    from mcpt import ServerConfig, run

    async def check(session):
        assert len(session.tools) == 3
        assert not await session.is_method_exist("prompts/get")

    run(ServerConfig(command="python", args=["server.py"]), check)

"""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Mapping, Sequence
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import anyio
import httpx
from mcp import ClientSession, McpError, StdioServerParameters, types
from mcp.client.stdio import stdio_client
from pydantic import Field

from mcpt.models.base import Model

log = logging.getLogger(__name__)

CLIENT_INFO = types.Implementation(name="mcpt", version="1.0.0")

TRANSPORT_ERRORS = (
    anyio.ClosedResourceError,
    anyio.BrokenResourceError,
    anyio.EndOfStream,
)


class SessionError(Exception):
    """Base class for session errors."""


class SessionConnectionError(SessionError, ConnectionError):
    """The transport could not be established or was lost."""


class SessionClosedError(SessionError):
    """A request was issued on a session that is already closed."""


class SessionTimeoutError(SessionError, TimeoutError):
    """The server did not answer within the configured read timeout."""


class ServerConfig(Model):
    """How to launch the MCP server under test."""

    command: str = Field(..., description="Executable to run (e.g. 'npx')")
    args: Sequence[str] = Field(default_factory=tuple, description="Arguments")
    env: Mapping[str, str] | None = Field(
        default=None,
        description="Environment for the server (None uses the SDK's safe default)",
    )
    cwd: Path | None = Field(default=None, description="Working directory")

    def to_parameters(self) -> StdioServerParameters:
        """Convert to the SDK's stdio launch parameters."""
        return StdioServerParameters(
            command=self.command,
            args=list(self.args),
            env=dict(self.env) if self.env is not None else None,
            cwd=self.cwd,
        )


@dataclass(kw_only=True)
class Session:
    """An open connection to an MCP server.

    ``tools``, ``resources`` and ``prompts`` are snapshots taken once at
    connect time; the ``list_*`` methods query the server again.
    """

    client: ClientSession
    capabilities: types.ServerCapabilities = field(
        default_factory=types.ServerCapabilities
    )
    server_info: types.Implementation | None = None
    tools: Sequence[types.Tool] = ()
    resources: Sequence[types.Resource] = ()
    prompts: Sequence[types.Prompt] = ()
    exit_stack: AsyncExitStack = field(default_factory=AsyncExitStack, repr=False)
    _closed: bool = field(default=False, repr=False)

    @property
    def closed(self) -> bool:
        return self._closed

    async def list_tools(self) -> list[types.Tool]:
        """Tools the server declares, or an empty list if it has none."""
        result = await self._list_category("tools", self.client.list_tools)
        return list(result.tools) if result is not None else []

    async def list_resources(self) -> list[types.Resource]:
        """Resources the server declares, or an empty list if it has none."""
        result = await self._list_category("resources", self.client.list_resources)
        return list(result.resources) if result is not None else []

    async def list_prompts(self) -> list[types.Prompt]:
        """Prompts the server declares, or an empty list if it has none."""
        result = await self._list_category("prompts", self.client.list_prompts)
        return list(result.prompts) if result is not None else []

    async def is_method_exist(self, name: str) -> bool:
        """Probe whether the server handles the JSON-RPC method ``name``.

        Warning: this is speculative. It sends a *real* request
        ``{"method": name, "params": {}}``, so if the method exists and has
        side effects, they happen. Any protocol-level rejection yields
        False, which includes a method that exists but fails on empty
        parameters; the two cases are not told apart.

        Raises:
            SessionConnectionError: If the connection is lost
            SessionTimeoutError: If the server does not answer within the read
                timeout
            SessionClosedError: If the session was already closed

        """
        self._ensure_open()
        request = types.Request[dict[str, Any], str](method=name, params={})

        try:
            await self.client.send_request(request, types.EmptyResult)  # type: ignore[arg-type]
        except McpError as e:
            self._raise_if_unresponsive(e, f"probing '{name}'")
            log.debug("Method %s rejected: %s", name, e.error.message)
            return False
        except TRANSPORT_ERRORS as e:
            raise SessionConnectionError(f"Connection lost while probing '{name}'") from e

        return True

    async def close(self) -> None:
        """Shut down the session and the server process. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        log.debug("Closing session")
        await self.exit_stack.aclose()

    async def _list_category[T](
        self, category: str, fetch: Callable[[], Awaitable[T]]
    ) -> T | None:
        """Run a list request, mapping protocol rejections to None."""
        self._ensure_open()
        try:
            return await fetch()
        except McpError as e:
            self._raise_if_unresponsive(e, f"listing {category}")
            log.info("No %s available: %s", category, e.error.message)
            return None
        except TRANSPORT_ERRORS as e:
            raise SessionConnectionError(f"Connection lost while listing {category}") from e

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError("Session is closed")

    @staticmethod
    def _raise_if_unresponsive(error: McpError, action: str) -> None:
        if error.error.code == httpx.codes.REQUEST_TIMEOUT:
            raise SessionTimeoutError(
                f"Timed out while {action}: {error.error.message}"
            ) from error
        if error.error.code == types.CONNECTION_CLOSED:
            raise SessionConnectionError(
                f"Connection lost while {action}: {error.error.message}"
            ) from error


async def connect(
    config: ServerConfig,
    *,
    client_info: types.Implementation = CLIENT_INFO,
    read_timeout: float | None = None,
) -> Session:
    """Start the server, run the handshake and snapshot its capabilities.

    The returned session must be closed by the caller, from the same task;
    prefer ``open_session`` which does that on every exit path.

    Args:
        config: How to launch the server
        client_info: Name and version the client announces
        read_timeout: Seconds to wait for any single response (None waits
            forever)

    Raises:
        SessionConnectionError: If the process cannot start, the handshake
            is rejected, or the server goes away before it completes

    """
    exit_stack = AsyncExitStack()
    timeout = timedelta(seconds=read_timeout) if read_timeout is not None else None

    try:
        read_stream, write_stream = await exit_stack.enter_async_context(
            stdio_client(config.to_parameters())
        )
        client = await exit_stack.enter_async_context(
            ClientSession(
                read_stream,
                write_stream,
                read_timeout_seconds=timeout,
                client_info=client_info,
            )
        )
        init = await client.initialize()
    except BaseException as e:
        # Teardown re-raises failures of the transport reader/writer tasks.
        try:
            await exit_stack.aclose()
        except Exception as teardown_error:
            raise SessionConnectionError(
                f"Failed to connect to MCP server '{config.command}': {teardown_error}"
            ) from teardown_error
        if not isinstance(e, Exception):
            raise
        raise SessionConnectionError(
            f"Failed to connect to MCP server '{config.command}': {e}"
        ) from e

    log.debug(
        "Connected to %s %s (protocol %s)",
        init.serverInfo.name,
        init.serverInfo.version,
        init.protocolVersion,
    )

    session = Session(
        client=client,
        capabilities=init.capabilities,
        server_info=init.serverInfo,
        exit_stack=exit_stack,
    )
    try:
        session.tools = tuple(await session.list_tools())
        session.resources = tuple(await session.list_resources())
        session.prompts = tuple(await session.list_prompts())
    except BaseException:
        await session.close()
        raise

    return session


@asynccontextmanager
async def open_session(
    config: ServerConfig,
    *,
    client_info: types.Implementation = CLIENT_INFO,
    read_timeout: float | None = None,
) -> AsyncGenerator[Session]:
    """Connect to a server and close the session however the block exits."""
    session = await connect(config, client_info=client_info, read_timeout=read_timeout)
    try:
        yield session
    finally:
        await session.close()


type SessionBody = Callable[[Session], Awaitable[None]]


async def mcpt(config: ServerConfig, body: SessionBody) -> None:
    """Run ``body`` against a freshly started server, then shut it down."""
    log.info("🚀 Starting mcpt with command: %s", config.command)
    async with open_session(config) as session:
        await body(session)


def run(config: ServerConfig, body: SessionBody) -> None:
    """Blocking entry point for test scripts.

    Exceptions from ``body`` propagate, so a failed assertion makes the
    script exit non-zero and the harness records the file as failed.
    """
    anyio.run(mcpt, config, body)
