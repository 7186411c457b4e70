"""Event model and decoder contract for webhook payloads.

Payloads sent by GitHub and Gitea carry a huge number of fields. Rather than
decoding everything, applications supply an ``EventDecoder`` that turns the
event types they care about into small event objects of their own, for
example::

    @dataclass
    class FooEvent:
        text: str

        def event_type(self) -> str:
            return "foo"

    def my_event_decoder(event_type: str, payload: bytes) -> Event | None:
        if event_type == "foo":
            return FooEvent(text=json.loads(payload)["text"])
        return minimal_event_decoder(event_type, payload)

Every decoder should recognize at least ``ping``, which both platforms send
to check the delivery path; delegating to ``minimal_event_decoder`` does that.
Unrecognized event types must yield ``None`` rather than an error, so that
"not interested" stays distinguishable from "malformed". Any exception a
decoder raises is reported to the sender as a 400 with the exception text;
raising ``EventDecodeError`` keeps that text meaningful.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

PING_EVENT_TYPE = "ping"


class EventDecodeError(Exception):
    """Raised by an event decoder when a payload cannot be decoded."""

    pass


@runtime_checkable
class Event(Protocol):
    """Any decoded webhook event."""

    def event_type(self) -> str:
        """Return the event type this event was decoded from."""
        ...


EventDecoder = Callable[[str, bytes], Event | None]
"""Maps ``(event_type, payload)`` to an event, or None if unsupported."""

EventCallback = Callable[[str, Event], None]
"""Receives ``(delivery_id, event)`` once per accepted delivery."""


@dataclass(frozen=True)
class MinimalPingEvent:
    """Returned by ``minimal_event_decoder`` for ``X-GitHub-Event: ping``."""

    def event_type(self) -> str:
        return PING_EVENT_TYPE


def minimal_event_decoder(event_type: str, payload: bytes) -> Event | None:  # noqa: ARG001
    """Decode ``ping`` events only.

    Args:
        event_type: The X-GitHub-Event header value.
        payload: The raw request body (unused).

    Returns:
        A MinimalPingEvent for ``ping``, None for anything else.
    """
    if event_type == PING_EVENT_TYPE:
        return MinimalPingEvent()
    return None
