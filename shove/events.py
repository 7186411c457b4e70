"""Event types that shove can trigger actions on."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from shove.webhook.events import Event, EventDecodeError, minimal_event_decoder

PUSH_EVENT_TYPE = "push"
STARTUP_EVENT_TYPE = "shove-startup"
PSEUDO_EVENT_PREFIX = "shove-"

BRANCH_REF_PREFIX = "refs/heads/"


@runtime_checkable
class ShoveEvent(Event, Protocol):
    """An event that actions can be triggered on."""

    def full_repo_name(self) -> str:
        """Return ``owner/name``, or an empty string for pseudo-events."""
        ...

    def env_variables(self) -> dict[str, str]:
        """Return the variables passed to commands run for this event."""
        ...


@dataclass(frozen=True)
class PushEvent:
    """Corresponds to ``X-GitHub-Event: push``."""

    ref: str
    commit: str
    repo_name: str
    repo_owner: str
    raw_payload: bytes = field(default=b"", repr=False)

    @classmethod
    def from_payload(cls, payload: bytes) -> PushEvent:
        """Decode a push event from its JSON payload.

        Args:
            payload: The raw request body.

        Returns:
            PushEvent instance.

        Raises:
            EventDecodeError: If the payload is not valid JSON or a field has
                the wrong type.
        """
        try:
            data = json.loads(payload)
        except ValueError as e:
            raise EventDecodeError(f"invalid JSON payload: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise EventDecodeError("push payload must be a JSON object")

        repository = _get_object(data, "repository")
        owner = _get_object(repository, "owner", path="repository.owner")

        return cls(
            ref=_get_string(data, "ref"),
            commit=_get_string(data, "after"),
            repo_name=_get_string(repository, "name", path="repository.name"),
            repo_owner=_get_string(owner, "name", path="repository.owner.name"),
            raw_payload=payload,
        )

    @property
    def branch(self) -> str:
        """The branch name if ``ref`` is a branch ref, else an empty string."""
        if self.ref.startswith(BRANCH_REF_PREFIX):
            return self.ref[len(BRANCH_REF_PREFIX) :]
        return ""

    def event_type(self) -> str:
        return PUSH_EVENT_TYPE

    def full_repo_name(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"

    def env_variables(self) -> dict[str, str]:
        return {
            "SHOVE_VAR_REF": self.ref,
            "SHOVE_VAR_BRANCH": self.branch,
            "SHOVE_VAR_COMMIT": self.commit,
            "SHOVE_VAR_REPO_NAME": self.repo_name,
            "SHOVE_VAR_REPO_OWNER": self.repo_owner,
            "SHOVE_PAYLOAD": self.raw_payload.decode("utf-8", errors="replace"),
        }


@dataclass(frozen=True)
class ShoveStartupEvent:
    """Pseudo-event that fires once when shove starts up."""

    def event_type(self) -> str:
        return STARTUP_EVENT_TYPE

    def full_repo_name(self) -> str:
        return ""

    def env_variables(self) -> dict[str, str]:
        return {}


SUPPORTED_EVENT_TYPES = frozenset({PUSH_EVENT_TYPE, STARTUP_EVENT_TYPE})


def is_supported_event_type(event_type: str) -> bool:
    """Check whether actions can be triggered on the given event type."""
    return event_type in SUPPORTED_EVENT_TYPES


def is_pseudo_event_type(event_type: str) -> bool:
    """Check whether the event type is generated by shove itself."""
    return event_type.startswith(PSEUDO_EVENT_PREFIX)


def decode_event(event_type: str, payload: bytes) -> Event | None:
    """Event decoder used by the shove server.

    Args:
        event_type: The X-GitHub-Event header value.
        payload: The raw request body.

    Returns:
        A PushEvent for ``push``, whatever minimal_event_decoder returns
        for anything else.

    Raises:
        EventDecodeError: If a push payload cannot be decoded.
    """
    if event_type == PUSH_EVENT_TYPE:
        return PushEvent.from_payload(payload)
    return minimal_event_decoder(event_type, payload)


def _get_object(data: dict[str, Any], key: str, path: str | None = None) -> dict[str, Any]:
    # Absent or null fields decode as empty
    value = data.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise EventDecodeError(f"field {path or key} must be an object")
    return value


def _get_string(data: dict[str, Any], key: str, path: str | None = None) -> str:
    value = data.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise EventDecodeError(f"field {path or key} must be a string")
    return value
