"""CLI configuration, read from environment variables."""

import os
from typing import Literal

import click
from pydantic import BaseModel, ValidationError

from bundler.constants import DEFAULT_BUNDLE_FILE_NAME

ENV_PREFIX = "BUNDLER_"

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class CliSettings(BaseModel):
    log_level: LogLevel = "WARNING"
    bundle_name: str = DEFAULT_BUNDLE_FILE_NAME


def get_settings() -> CliSettings:
    """Build settings from ``BUNDLER_*`` environment variables."""
    values = {}
    for field_name in CliSettings.model_fields:
        raw = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if raw:
            values[field_name] = raw.upper() if field_name == "log_level" else raw

    try:
        return CliSettings(**values)
    except ValidationError as e:
        raise click.UsageError(f"Invalid configuration in environment: {e.errors()[0]['msg']}")
