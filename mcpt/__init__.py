"""Testing harness for Model Context Protocol servers."""

from mcpt.session import (
    ServerConfig,
    Session,
    SessionClosedError,
    SessionConnectionError,
    SessionError,
    SessionTimeoutError,
    connect,
    mcpt,
    open_session,
    run,
)

__all__ = [
    "ServerConfig",
    "Session",
    "SessionClosedError",
    "SessionConnectionError",
    "SessionError",
    "SessionTimeoutError",
    "connect",
    "mcpt",
    "open_session",
    "run",
]
