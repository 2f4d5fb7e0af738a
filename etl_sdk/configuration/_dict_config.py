"""Helpers for parsing and wrangling configuration dictionaries."""

from __future__ import annotations

import logging
import os
import typing as t
from pathlib import Path

import jsonschema
from dotenv import find_dotenv
from dotenv.main import DotEnv

from etl_sdk.exceptions import ConfigValidationError
from etl_sdk.helpers import _typing
from etl_sdk.helpers._util import load_json, read_json_file

logger = logging.getLogger(__name__)

TRUTHY = ("true", "1", "yes", "on")
ENV_PREFIX = "ETL_SDK_"


def _legacy_parse_array_of_strings(value: str) -> list[str]:
    return value.split(",")


def parse_environment_config(
    config_schema: dict[str, t.Any],
    prefix: str = ENV_PREFIX,
    dotenv_path: str | None = None,
) -> dict[str, t.Any]:
    """Parse configuration from environment variables.

    Args:
        config_schema: A JSON Schema dictionary for the configuration.
        prefix: Prefix for environment variables.
        dotenv_path: Path to a .env file. If None, will try to find one in increasingly
            higher folders.

    Returns:
        A configuration dictionary.
    """
    result: dict[str, t.Any] = {}

    if not dotenv_path:
        dotenv_path = find_dotenv(usecwd=True)

    logger.debug("Loading configuration from %s", dotenv_path)
    DotEnv(dotenv_path).set_as_environment_variables()

    for config_key, schema in config_schema.get("properties", {}).items():
        env_var_name = prefix + config_key.upper().replace("-", "_")
        if env_var_name in os.environ:
            env_var_value = os.environ[env_var_name]
            logger.info(
                "Parsing '%s' config from env variable '%s'.",
                config_key,
                env_var_name,
            )
            if _typing.is_integer_type(schema):
                result[config_key] = int(env_var_value)
            elif _typing.is_boolean_type(schema):
                result[config_key] = env_var_value.lower() in TRUTHY
            elif _typing.is_string_array_type(schema):
                if env_var_value.lstrip().startswith("["):
                    result[config_key] = load_json(env_var_value)
                else:
                    result[config_key] = _legacy_parse_array_of_strings(env_var_value)
            elif _typing.is_array_type(schema) or _typing.is_object_type(schema):
                result[config_key] = load_json(env_var_value)
            else:
                result[config_key] = env_var_value
    return result


def merge_config_sources(
    inputs: t.Iterable[str],
    config_schema: dict[str, t.Any],
    env_prefix: str = ENV_PREFIX,
) -> dict[str, t.Any]:
    """Merge configuration from multiple sources into a single dictionary.

    Later inputs override top-level keys from earlier ones.

    Args:
        inputs: A sequence of configuration sources (file paths or ENV).
        config_schema: A JSON Schema dictionary for the configuration.
        env_prefix: Prefix for environment variables.

    Raises:
        FileNotFoundError: If any of config files does not exist.

    Returns:
        A single configuration dictionary.
    """
    config: dict[str, t.Any] = {}
    for config_input in inputs:
        if config_input == "ENV":
            env_config = parse_environment_config(config_schema, prefix=env_prefix)
            config.update(env_config)
            continue

        config_path = Path(config_input)

        if not config_path.is_file():
            msg = (
                f"Could not locate config file at '{config_path}'. Please check that "
                "the file exists."
            )
            raise FileNotFoundError(msg)

        config.update(read_json_file(config_path))

    return config


def _format_validation_error(error: jsonschema.ValidationError) -> str:
    result = f"{error.message}"

    if error.path:
        result += f" in config[{']['.join(repr(index) for index in error.path)}]"

    return result


def validate_config(
    config: t.Mapping[str, t.Any],
    config_schema: dict[str, t.Any],
) -> None:
    """Validate configuration against a JSON schema.

    Args:
        config: The configuration to validate.
        config_schema: A JSON Schema dictionary for the configuration.

    Raises:
        ConfigValidationError: If any validation errors are found.
    """
    logger.debug("Validating config using jsonschema: %s", config_schema)
    validator = jsonschema.Draft7Validator(config_schema)
    errors = [
        _format_validation_error(e)
        for e in sorted(validator.iter_errors(dict(config)), key=str)
    ]
    if errors:
        summary = f"Config validation failed: {'; '.join(errors)}"
        raise ConfigValidationError(summary, errors=errors)
