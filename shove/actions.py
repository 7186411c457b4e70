"""Actions that run commands when matching events arrive."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from shove.events import ShoveEvent, is_pseudo_event_type, is_supported_event_type
from shove.utils.logging import get_logger

if TYPE_CHECKING:
    from shove.webhook.events import Event

logger = get_logger("actions")


@dataclass
class Trigger:
    """One entry of an action's ``on`` list."""

    events: list[str] = field(default_factory=list)
    repos: list[str] = field(default_factory=list)

    def matches(self, event: ShoveEvent) -> bool:
        """Check whether the event is of a listed type and for a listed repo.

        Pseudo-events have no repository and match on event type alone.
        """
        if event.event_type() not in self.events:
            return False
        full_repo_name = event.full_repo_name()
        return not full_repo_name or full_repo_name in self.repos


@dataclass
class Action:
    """An action that can be taken upon receiving a matching event."""

    name: str = ""
    triggers: list[Trigger] = field(default_factory=list)
    command: list[str] = field(default_factory=list)

    def matches(self, event: ShoveEvent) -> bool:
        """Check if the event matches any of this action's triggers."""
        return any(trigger.matches(event) for trigger in self.triggers)

    def execute(self, guid: str, event: ShoveEvent) -> None:
        """Run this action's command for the given event.

        The command inherits the process environment plus the event's
        variables. Failures are logged and do not propagate.

        Args:
            guid: The delivery ID of the event.
            event: The event that triggered this action.
        """
        logger.info("Executing action", extra={"delivery_id": guid, "action": self.name})

        if not self.command:
            return

        env = dict(os.environ)
        env.update(event.env_variables())

        try:
            result = subprocess.run(  # noqa: S603
                self.command,
                stdin=subprocess.DEVNULL,
                env=env,
                check=False,
            )
        except (OSError, ValueError) as e:
            logger.error(
                "Command failed to start",
                extra={"delivery_id": guid, "command": self.command, "error": str(e)},
            )
            return

        if result.returncode != 0:
            logger.error(
                "Command failed",
                extra={
                    "delivery_id": guid,
                    "command": self.command,
                    "returncode": result.returncode,
                },
            )


@dataclass
class Configuration:
    """Contents of the shove configuration file."""

    actions: list[Action] = field(default_factory=list)

    def validate(self) -> list[str]:
        """Check for semantic errors that YAML decoding cannot detect.

        Returns:
            List of error messages, empty if the configuration is valid.
        """
        errors: list[str] = []

        for a_idx, action in enumerate(self.actions):
            if not action.name:
                errors.append(f"actions[{a_idx}].name may not be empty")
            if not action.triggers:
                errors.append(f"actions[{a_idx}].on may not be empty")

            for t_idx, trigger in enumerate(action.triggers):
                path = f"actions[{a_idx}].on[{t_idx}]"
                if not trigger.events:
                    errors.append(f"{path}.events may not be empty")

                pseudo_events = []
                for event_type in trigger.events:
                    if not is_supported_event_type(event_type):
                        errors.append(
                            f"{path}.events contains unsupported event type {event_type!r}"
                        )
                    if is_pseudo_event_type(event_type):
                        pseudo_events.append(event_type)

                if pseudo_events and trigger.repos:
                    errors.append(
                        f"{path} matches pseudo-events {pseudo_events}, "
                        "but also requires a match on repository names"
                    )

            if not action.command:
                errors.append(f"actions[{a_idx}].run.command is missing")

        return errors

    def handle_event(self, guid: str, event: Event) -> None:
        """Run every action matching the event.

        Suitable as the WebhookHandler callback. Events that actions cannot
        be triggered on (such as ``ping``) are ignored.

        Args:
            guid: The delivery ID of the event.
            event: The decoded event.
        """
        if not isinstance(event, ShoveEvent):
            logger.debug(
                "Ignoring event without actions",
                extra={"delivery_id": guid, "event_type": event.event_type()},
            )
            return

        logger.info(
            "Received event",
            extra={
                "delivery_id": guid,
                "event_type": event.event_type(),
                "repository": event.full_repo_name() or None,
            },
        )

        for action in self.actions:
            if action.matches(event):
                action.execute(guid, event)
