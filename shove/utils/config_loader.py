"""Configuration file loader."""

from pathlib import Path  # noqa: TC003
from typing import Any

import yaml

from shove.actions import Action, Configuration, Trigger
from shove.utils.logging import get_logger

logger = get_logger("utils.config_loader")


class ConfigLoaderError(Exception):
    """Error raised when configuration loading fails."""

    pass


def load_config(path: Path) -> Configuration:
    """Load the action configuration from a YAML file.

    Unknown keys are rejected so that typos do not silently disable
    triggers. Semantic checks are left to ``Configuration.validate``.

    Args:
        path: Path to the configuration file.

    Returns:
        Configuration instance.

    Raises:
        ConfigLoaderError: If the file cannot be read or parsed.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoaderError(f"Failed to read config file {path}: {e}") from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigLoaderError(f"Failed to parse config file {path}: {e}") from e

    try:
        config = parse_config(raw_config or {})
    except ValueError as e:
        raise ConfigLoaderError(f"Invalid configuration in {path}: {e}") from e

    logger.info(
        "Loaded configuration",
        extra={"file": str(path), "actions": len(config.actions)},
    )
    return config


def parse_config(raw_config: Any) -> Configuration:
    """Build a Configuration from decoded YAML.

    Args:
        raw_config: The decoded YAML document.

    Returns:
        Configuration instance.

    Raises:
        ValueError: If the document does not have the expected structure.
    """
    data = _expect_mapping(raw_config, "configuration", {"actions"})
    actions = _expect_list(data.get("actions"), "actions")
    return Configuration(
        actions=[_parse_action(raw, f"actions[{idx}]") for idx, raw in enumerate(actions)],
    )


def _parse_action(raw: Any, path: str) -> Action:
    data = _expect_mapping(raw, path, {"name", "on", "run"})
    run_value = data.get("run")
    run = _expect_mapping({} if run_value is None else run_value, f"{path}.run", {"command"})
    triggers = _expect_list(data.get("on"), f"{path}.on")

    return Action(
        name=_expect_string(data.get("name"), f"{path}.name"),
        triggers=[
            _parse_trigger(trigger, f"{path}.on[{idx}]") for idx, trigger in enumerate(triggers)
        ],
        command=_expect_strings(run.get("command"), f"{path}.run.command"),
    )


def _parse_trigger(raw: Any, path: str) -> Trigger:
    data = _expect_mapping(raw, path, {"events", "repos"})
    return Trigger(
        events=_expect_strings(data.get("events"), f"{path}.events"),
        repos=_expect_strings(data.get("repos"), f"{path}.repos"),
    )


def _expect_mapping(value: Any, path: str, allowed_keys: set[str]) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{path} must be a mapping")
    unknown = sorted(str(key) for key in value if key not in allowed_keys)
    if unknown:
        raise ValueError(f"{path} contains unknown field(s): {', '.join(unknown)}")
    return value


def _expect_list(value: Any, path: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{path} must be a list")
    return value


def _expect_string(value: Any, path: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{path} must be a string")
    return value


def _expect_strings(value: Any, path: str) -> list[str]:
    items = _expect_list(value, path)
    for idx, item in enumerate(items):
        if not isinstance(item, str):
            raise ValueError(f"{path}[{idx}] must be a string")
    return items
