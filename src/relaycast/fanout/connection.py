"""Per-relay protocol state machine.

A [RelayConnection][relaycast.fanout.connection.RelayConnection] owns one
WebSocket to one relay for the lifetime of one query or publish call and
reports exactly one [RelayOutcome][relaycast.models.outcome.RelayOutcome].

Transition table:

```text
CONNECTING --handshake ok--> OPEN                  send REQ | EVENT
OPEN --AUTH, no key--> FINISHED(fail auth_required)
OPEN --AUTH, key--> AUTH_REQUESTED --> AUTHENTICATING --> OPEN
                                   send ["AUTH", ev], resend REQ | EVENT once
OPEN --second AUTH--> OPEN         (ignored: one attempt per connection)
OPEN --EOSE | limit reached--> FINISHED(ok)        query
OPEN --OK true--> FINISHED(ok)                     publish
OPEN --OK false--> FINISHED(fail <relay message>)  publish
OPEN --socket close--> FINISHED                    query: ok "closed" if events buffered,
                                                   else fail "closed_no_events";
                                                   publish: fail "closed"
*    --timer | socket error | send error--> FINISHED(fail)
```

A single ``asyncio.timeout`` covers connect, authentication, and the
response wait. Teardown (best-effort ``CLOSE`` for a query subscription,
then socket close) runs once on every exit path through an
``AsyncExitStack``; it is bounded by its own short timeouts and can never
turn a finished outcome into a timeout.
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from typing import Final

from relaycast.core.exceptions import (
    AuthenticationError,
    ConnectivityError,
    ProtocolError,
    SendError,
)
from relaycast.core.logger import Logger
from relaycast.core.metrics import RELAY_CONNECTION_SECONDS, RELAY_OUTCOMES, outcome_label
from relaycast.models.constants import (
    AUTH_REQUIRED_PREFIX,
    ConnectionMode,
    ConnectionState,
    FailureReason,
)
from relaycast.models.event import Event
from relaycast.models.filter import Filter
from relaycast.models.outcome import RelayOutcome
from relaycast.nips.nip01 import (
    AuthMessage,
    ClosedMessage,
    EoseMessage,
    EventMessage,
    NoticeMessage,
    OkMessage,
    RelayMessage,
    decode_message,
    encode_auth,
    encode_close,
    encode_event,
    encode_req,
    new_subscription_id,
)
from relaycast.nips.nip42 import build_auth_event
from relaycast.utils.keys import NostrSdkSigner, Signer
from relaycast.utils.transport import RelaySocket, SocketFactory, open_relay_socket


DEFAULT_TIMEOUT: Final[float] = 8.0

_CLOSE_SEND_TIMEOUT: Final[float] = 1.0

_logger = Logger("fanout.connection")


class RelayConnection:
    """One relay, one socket, one call, one outcome.

    Args:
        relay: Normalized relay URL. Also used as the NIP-42 ``relay`` tag.
        mode: [ConnectionMode][relaycast.models.constants.ConnectionMode].
        event_filter: Filter to send in query mode.
        event: Signed event to send in publish mode.
        timeout: Lifetime budget of the connection in seconds.
        auth_private_key: Secret key used to answer an ``AUTH`` challenge.
        signer: Signing collaborator (defaults to
            [NostrSdkSigner][relaycast.utils.keys.NostrSdkSigner]).
        socket_factory: Opens the WebSocket (defaults to
            [open_relay_socket][relaycast.utils.transport.open_relay_socket]).

    Raises:
        ValueError: If the payload does not match the mode.
    """

    def __init__(
        self,
        relay: str,
        mode: ConnectionMode,
        *,
        event_filter: Filter | None = None,
        event: Event | None = None,
        timeout: float = DEFAULT_TIMEOUT,  # noqa: ASYNC109
        auth_private_key: str | None = None,
        signer: Signer | None = None,
        socket_factory: SocketFactory = open_relay_socket,
    ) -> None:
        if mode is ConnectionMode.QUERY and event_filter is None:
            raise ValueError("query mode requires event_filter")
        if mode is ConnectionMode.PUBLISH and event is None:
            raise ValueError("publish mode requires event")

        self.relay = relay
        self.mode = mode
        self.state = ConnectionState.CONNECTING
        self.outcome: RelayOutcome | None = None

        self._filter = event_filter
        self._event = event
        self._timeout = timeout
        self._auth_private_key = auth_private_key or None
        self._signer = signer or NostrSdkSigner()
        self._socket_factory = socket_factory
        self._log = _logger.bind(relay=relay, mode=mode.value)

        self._subscription_id = new_subscription_id() if mode is ConnectionMode.QUERY else None
        self._events: dict[str, Event] = {}
        self._auth_attempted = False
        self._auth_event_id: str | None = None
        self._sends = 0
        self._replies = 0

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def subscription_id(self) -> str | None:
        return self._subscription_id

    @property
    def auth_attempted(self) -> bool:
        return self._auth_attempted

    @property
    def request_sends(self) -> int:
        """How many times the pending ``REQ``/``EVENT`` has been written."""
        return self._sends

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def run(self) -> RelayOutcome:
        """Drive the connection to ``FINISHED`` and return its outcome.

        Never raises for relay-side problems; every failure becomes a
        ``fail`` outcome. ``asyncio.CancelledError`` from the caller
        propagates after teardown.
        """
        if self.outcome is not None:
            return self.outcome

        started = time.monotonic()
        self._log.debug("connection_started", timeout_s=self._timeout)

        async with contextlib.AsyncExitStack() as stack:
            sock: RelaySocket | None = None
            try:
                async with asyncio.timeout(self._timeout):
                    sock = await stack.enter_async_context(self._socket_factory(self.relay))
                    self._transition(ConnectionState.OPEN)
                    await self._send_request(sock)
                    outcome = await self._receive_loop(sock)
            except TimeoutError:
                outcome = self._on_timeout()
            except SendError as e:
                outcome = self._finish(False, f"{FailureReason.SEND_FAILED}: {e}")
            except ConnectivityError as e:
                outcome = self._finish(False, str(e) or type(e).__name__)
            except Exception as e:  # Intentionally broad: per-relay error boundary
                self._log.exception("connection_error", error=str(e))
                outcome = self._finish(False, f"error: {e}")
            finally:
                if sock is not None:
                    await self._teardown(sock)

        elapsed = time.monotonic() - started
        RELAY_CONNECTION_SECONDS.labels(operation=self.mode.value).observe(elapsed)
        RELAY_OUTCOMES.labels(
            operation=self.mode.value,
            result=outcome_label(outcome.ok, outcome.reason),
        ).inc()
        self._log.debug(
            "connection_finished",
            ok=outcome.ok,
            reason=outcome.reason,
            events=len(outcome.events),
            duration_s=round(elapsed, 3),
        )
        return outcome

    async def _teardown(self, sock: RelaySocket) -> None:
        """Best-effort unsubscribe; the exit stack closes the socket afterwards."""
        if self._subscription_id is None or self._sends == 0:
            return
        # Socket may already be closed by the relay
        with contextlib.suppress(Exception):
            await asyncio.wait_for(
                sock.send(encode_close(self._subscription_id)), timeout=_CLOSE_SEND_TIMEOUT
            )

    def _transition(self, state: ConnectionState) -> None:
        self._log.debug("state_changed", previous=self.state.value, state=state.value)
        self.state = state

    def _finish(self, ok: bool, reason: str | None = None) -> RelayOutcome:
        if self.outcome is None:
            self._transition(ConnectionState.FINISHED)
            self.outcome = RelayOutcome(
                relay=self.relay,
                ok=ok,
                events=tuple(self._events.values()),
                reason=reason,
            )
        return self.outcome

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    async def _send_request(self, sock: RelaySocket) -> None:
        if self.mode is ConnectionMode.QUERY:
            assert self._subscription_id is not None  # noqa: S101  # set for query mode
            assert self._filter is not None  # noqa: S101  # checked in __init__
            frame = encode_req(self._subscription_id, self._filter)
        else:
            assert self._event is not None  # noqa: S101  # checked in __init__
            frame = encode_event(self._event)
        await sock.send(frame)
        self._sends += 1
        self._log.debug("request_sent", attempt=self._sends)

    # -------------------------------------------------------------------------
    # Receiving
    # -------------------------------------------------------------------------

    async def _receive_loop(self, sock: RelaySocket) -> RelayOutcome:
        while True:
            raw = await sock.receive()
            if raw is None:
                return self._on_socket_closed()

            try:
                message = decode_message(raw)
            except ProtocolError as e:
                self._log.debug("frame_ignored", error=str(e), frame=raw)
                continue

            outcome = await self._dispatch(sock, message)
            if outcome is not None:
                return outcome

    async def _dispatch(self, sock: RelaySocket, message: RelayMessage) -> RelayOutcome | None:
        if isinstance(message, AuthMessage):
            return await self._on_auth(sock, message)
        if isinstance(message, OkMessage):
            return self._on_ok(message)
        if self.mode is ConnectionMode.QUERY:
            if isinstance(message, EventMessage):
                return self._on_event(message)
            if isinstance(message, EoseMessage):
                if message.subscription_id == self._subscription_id:
                    return self._finish(True)
                return None
            if isinstance(message, ClosedMessage):
                return self._on_closed(message)
        if isinstance(message, NoticeMessage):
            self._log.debug("relay_notice", notice=message.message)
        return None

    def _on_event(self, message: EventMessage) -> RelayOutcome | None:
        if message.subscription_id != self._subscription_id:
            return None
        self._events[message.event.id] = message.event
        assert self._filter is not None  # noqa: S101  # query mode
        limit = self._filter.limit
        if limit is not None and len(self._events) >= limit:
            return self._finish(True)
        return None

    def _on_closed(self, message: ClosedMessage) -> RelayOutcome | None:
        if message.subscription_id != self._subscription_id:
            return None
        self._replies += 1
        if self._is_auth_gate(message.message):
            if self._awaiting_auth():
                return None
            if self._auth_private_key is None:
                return self._finish(False, FailureReason.AUTH_REQUIRED)
        if self._events:
            return self._finish(True, FailureReason.CLOSED)
        return self._finish(False, message.message or FailureReason.CLOSED)

    def _on_ok(self, message: OkMessage) -> RelayOutcome | None:
        if self._auth_event_id is not None and message.event_id == self._auth_event_id:
            if not message.accepted:
                return self._finish(
                    False, f"{FailureReason.AUTH_FAILED}: {message.message or 'rejected'}"
                )
            self._log.debug("auth_accepted")
            return None

        if self.mode is not ConnectionMode.PUBLISH:
            return None
        assert self._event is not None  # noqa: S101  # publish mode
        if message.event_id != self._event.id:
            return None

        self._replies += 1
        if message.accepted:
            return self._finish(True, message.message or None)
        if self._is_auth_gate(message.message):
            if self._awaiting_auth():
                return None
            if self._auth_private_key is None:
                return self._finish(False, FailureReason.AUTH_REQUIRED)
        return self._finish(False, message.message)

    async def _on_auth(self, sock: RelaySocket, message: AuthMessage) -> RelayOutcome | None:
        if self._auth_attempted:
            self._log.debug("auth_challenge_ignored")
            return None

        self._transition(ConnectionState.AUTH_REQUESTED)
        if self._auth_private_key is None:
            return self._finish(False, FailureReason.AUTH_REQUIRED)

        self._auth_attempted = True
        self._transition(ConnectionState.AUTHENTICATING)
        try:
            auth_event = build_auth_event(
                self.relay, message.challenge, self._auth_private_key, self._signer
            )
        except AuthenticationError as e:
            self._log.warning("auth_sign_failed", error=str(e))
            return self._finish(False, f"{FailureReason.AUTH_FAILED}: {e}")

        try:
            await sock.send(encode_auth(auth_event))
        except SendError as e:
            return self._finish(False, f"{FailureReason.AUTH_FAILED}: {e}")

        self._auth_event_id = auth_event.id
        self._log.debug("auth_sent", auth_event_id=auth_event.id)
        self._transition(ConnectionState.OPEN)
        await self._send_request(sock)
        return None

    def _on_socket_closed(self) -> RelayOutcome:
        if self.mode is ConnectionMode.QUERY:
            if self._events:
                return self._finish(True, FailureReason.CLOSED)
            return self._finish(False, FailureReason.CLOSED_NO_EVENTS)
        return self._finish(False, FailureReason.CLOSED)

    def _on_timeout(self) -> RelayOutcome:
        # Buffered events stay on the outcome for the aggregator to merge
        return self._finish(False, FailureReason.TIMEOUT)

    # -------------------------------------------------------------------------
    # Auth gating
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_auth_gate(text: str | None) -> bool:
        return text is not None and text.startswith(AUTH_REQUIRED_PREFIX)

    def _awaiting_auth(self) -> bool:
        """Whether an ``auth-required:`` rejection should wait for the auth path.

        True when a key is available and either no challenge has been
        answered yet, or the request re-sent after authentication is still
        unanswered (the rejection belongs to the first, unauthenticated send).
        """
        if self._auth_private_key is None:
            return False
        if not self._auth_attempted:
            return True
        return self._replies < self._sends
