"""ASGI handler that authenticates, decodes and dispatches webhook deliveries."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect, Request
from starlette.responses import PlainTextResponse, Response

from shove.utils.logging import get_logger
from shove.webhook.events import minimal_event_decoder
from shove.webhook.validators import WebhookSignatureError, verify_request_signature

if TYPE_CHECKING:
    from starlette.types import Receive, Scope, Send

    from shove.webhook.events import EventCallback, EventDecoder

logger = get_logger("webhook.handler")

EVENT_TYPE_HEADER = "X-GitHub-Event"
DELIVERY_ID_HEADER = "X-GitHub-Delivery"

# GitHub caps webhook payloads at 25 MiB
MAX_BODY_SIZE = 25 << 20


class BodyReadError(Exception):
    """Raised when the request body cannot be read."""

    pass


class WebhookHandler:
    """Receives GitHub/Gitea webhooks and hands accepted events to a callback.

    The handler is a plain ASGI application. It does not match on paths, so
    mount it in a router if it should only serve a specific one.
    """

    def __init__(
        self,
        secret_key: str,
        callback: EventCallback,
        event_decoder: EventDecoder | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            secret_key: The secret the sending platform signs events with.
            callback: Called once per valid event with (delivery_id, event).
            event_decoder: Maps event types to event objects. Defaults to
                minimal_event_decoder, which only understands ``ping``.
        """
        self.secret_key = secret_key
        self.callback = callback
        self.event_decoder = event_decoder or minimal_event_decoder

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI entry point."""
        request = Request(scope, receive)
        response = await self.handle(request)
        await response(scope, receive, send)

    async def handle(self, request: Request) -> Response:  # noqa: PLR0911
        """Process one webhook delivery.

        Args:
            request: The incoming request.

        Returns:
            The response to send back to the platform.
        """
        if request.method != "POST":
            return PlainTextResponse("method not allowed", status_code=405)

        try:
            body = await self._read_body(request)
        except BodyReadError as e:
            logger.error("Failed to read request body", extra={"error": str(e)})
            return PlainTextResponse(str(e), status_code=500)

        try:
            verify_request_signature(self.secret_key, request.headers, body)
        except WebhookSignatureError as e:
            logger.warning("Signature verification failed", extra={"error": str(e)})
            return PlainTextResponse(str(e), status_code=401)

        event_type = request.headers.get(EVENT_TYPE_HEADER, "")
        delivery_id = request.headers.get(DELIVERY_ID_HEADER, "")

        try:
            event = self.event_decoder(event_type, body)
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Failed to decode event",
                extra={"event_type": event_type, "delivery_id": delivery_id, "error": str(e)},
            )
            return PlainTextResponse(str(e), status_code=400)

        if event is None:
            logger.info(
                "Ignoring unsupported event type",
                extra={"event_type": event_type, "delivery_id": delivery_id},
            )
            return PlainTextResponse("event type not supported", status_code=501)

        await run_in_threadpool(self.callback, delivery_id, event)
        return Response(status_code=204)

    async def _read_body(self, request: Request) -> bytes:
        """Read the request body, refusing anything beyond MAX_BODY_SIZE.

        Args:
            request: The incoming request.

        Returns:
            The raw body bytes.

        Raises:
            BodyReadError: If the client disconnects or the body is too large.
        """
        chunks: list[bytes] = []
        size = 0
        try:
            async for chunk in request.stream():
                size += len(chunk)
                if size > MAX_BODY_SIZE:
                    raise BodyReadError(f"request body exceeds {MAX_BODY_SIZE} bytes")
                chunks.append(chunk)
        except ClientDisconnect as e:
            raise BodyReadError("client disconnected while sending request body") from e
        return b"".join(chunks)
