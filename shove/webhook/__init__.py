"""Webhook authentication, decoding and dispatch."""

from shove.webhook.events import (
    Event,
    EventCallback,
    EventDecodeError,
    EventDecoder,
    MinimalPingEvent,
    minimal_event_decoder,
)
from shove.webhook.handler import MAX_BODY_SIZE, WebhookHandler
from shove.webhook.validators import (
    InvalidSignatureError,
    MissingSignatureError,
    WebhookSignatureError,
    verify_gitea_signature,
    verify_github_signature,
    verify_request_signature,
)

__all__ = [
    "MAX_BODY_SIZE",
    "Event",
    "EventCallback",
    "EventDecodeError",
    "EventDecoder",
    "InvalidSignatureError",
    "MinimalPingEvent",
    "MissingSignatureError",
    "WebhookHandler",
    "WebhookSignatureError",
    "minimal_event_decoder",
    "verify_gitea_signature",
    "verify_github_signature",
    "verify_request_signature",
]
