"""aiohttp WebSocket transport for relay connections.

Provides [open_relay_socket()][relaycast.utils.transport.open_relay_socket],
an async context manager that owns one ``aiohttp.ClientSession`` and one
WebSocket for exactly the lifetime of a single query or publish call. The
socket and session are released on every exit path (success, failure, or
cancellation), so callers never write ad hoc double-close guards.

Note:
    Connection lifetime is bounded by the caller's own timeout scope. The
    session carries no total timeout of its own so it can never expire
    before (or independently of) the connection-local timer.

Examples:
    ```python
    async with open_relay_socket("wss://relay.damus.io") as sock:
        await sock.send('["REQ","sub",{"limit":1}]')
        frame = await sock.receive()
    ```
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager
from typing import Final, Protocol

import aiohttp

from relaycast.core.exceptions import ConnectivityError, SendError


logger = logging.getLogger(__name__)

_WS_CLOSE_TIMEOUT: Final[float] = 5.0
_WS_HEARTBEAT: Final[float] = 30.0
# Large relay frames (long-form content, big contact lists) exceed aiohttp's 4 MiB default
_WS_MAX_MSG_SIZE: Final[int] = 16 * 1024 * 1024


class RelaySocket(Protocol):
    """Minimal text-frame socket interface used by the connection state machine."""

    async def send(self, text: str) -> None:
        """Send one text frame; raise [SendError][relaycast.core.exceptions.SendError] on failure."""
        ...

    async def receive(self) -> str | None:
        """Return the next text frame, or ``None`` once the socket is closed.

        Raises [ConnectivityError][relaycast.core.exceptions.ConnectivityError]
        on a transport error.
        """
        ...


SocketFactory = Callable[[str], AbstractAsyncContextManager[RelaySocket]]


class AiohttpRelaySocket:
    """[RelaySocket][relaycast.utils.transport.RelaySocket] over ``aiohttp.ClientWebSocketResponse``."""

    def __init__(
        self,
        ws: aiohttp.ClientWebSocketResponse,
        session: aiohttp.ClientSession,
        close_timeout: float = _WS_CLOSE_TIMEOUT,
    ) -> None:
        self._ws = ws
        self._session = session
        self._close_timeout = close_timeout

    async def send(self, text: str) -> None:
        if self._ws.closed:
            raise SendError("socket is closed")
        try:
            await self._ws.send_str(text)
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as e:
            raise SendError(str(e) or type(e).__name__) from e

    async def receive(self) -> str | None:
        while True:
            msg = await self._ws.receive()
            if msg.type == aiohttp.WSMsgType.TEXT:
                return msg.data
            if msg.type == aiohttp.WSMsgType.BINARY:
                return msg.data.decode("utf-8", errors="replace")
            if msg.type == aiohttp.WSMsgType.ERROR:
                error = self._ws.exception()
                raise ConnectivityError(str(error) if error else "websocket error")
            if msg.type in (
                aiohttp.WSMsgType.CLOSE,
                aiohttp.WSMsgType.CLOSING,
                aiohttp.WSMsgType.CLOSED,
            ):
                return None
            # PING/PONG are answered by aiohttp (autoping)

    async def close(self) -> None:
        """Close the WebSocket and session, bounded by ``close_timeout``."""
        # aiohttp can raise ClientError, ServerDisconnectedError, etc. during
        # close; teardown is best-effort.
        with contextlib.suppress(Exception):
            await asyncio.wait_for(self._ws.close(), timeout=self._close_timeout)
        with contextlib.suppress(Exception):
            await asyncio.wait_for(self._session.close(), timeout=self._close_timeout)


@contextlib.asynccontextmanager
async def open_relay_socket(url: str) -> AsyncIterator[AiohttpRelaySocket]:
    """Open a WebSocket to *url* and close it when the block exits.

    Args:
        url: Relay URL (``ws://`` or ``wss://``).

    Yields:
        The connected socket.

    Raises:
        ConnectivityError: If the handshake fails (DNS, refused, TLS,
            HTTP upgrade rejected, ...).
        asyncio.CancelledError: If cancelled (including by an enclosing
            ``asyncio.timeout``).
    """
    session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=None))
    try:
        ws = await session.ws_connect(
            url,
            heartbeat=_WS_HEARTBEAT,
            max_msg_size=_WS_MAX_MSG_SIZE,
        )
    except aiohttp.ClientError as e:
        await session.close()
        logger.debug("ws_connect_failed url=%s error=%s", url, str(e))
        raise ConnectivityError(f"connect_failed: {e}") from e
    except OSError as e:
        await session.close()
        logger.debug("ws_connect_error url=%s error=%s", url, str(e))
        raise ConnectivityError(f"connect_failed: {e}") from e
    except BaseException:
        # Cancellation (timer expiry) or anything unexpected: release the session
        await session.close()
        raise

    sock = AiohttpRelaySocket(ws, session)
    try:
        yield sock
    finally:
        await sock.close()
