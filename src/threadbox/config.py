"""Configuration management for the inbox core.

Settings come from environment variables, with ``.env`` support through
python-dotenv, and are validated with Pydantic.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from threadbox.errors import ConfigError
from threadbox.reconcile import ReplyPolicy

ENV_PREFIX = "THREADBOX_"


class InboxConfig(BaseModel):
    """Inbox core configuration.

    Attributes:
        api_token: Token passed to every collaborator call
        reply_policy: How fetched replies are merged into threads
        missing_timestamp: "now" stamps processing time, "reject" drops the message
        parallel_reply_fetch: Reconcile threads concurrently during refresh
        admin_name: Sender name on optimistic administrator replies
        admin_email: Sender address on optimistic administrator replies
        log_level: Logging level for the CLI
    """

    api_token: Optional[str] = Field(default=None)
    reply_policy: ReplyPolicy = Field(default=ReplyPolicy.REPLACE)
    missing_timestamp: str = Field(default="now")
    parallel_reply_fetch: bool = Field(default=False)
    admin_name: str = Field(default="Admin")
    admin_email: str = Field(default="admin@example.com")
    log_level: str = Field(default="WARNING")

    @field_validator("missing_timestamp")
    @classmethod
    def check_missing_timestamp(cls, v: str) -> str:
        v = v.lower()
        if v not in ("now", "reject"):
            raise ValueError(f"must be 'now' or 'reject', got {v!r}")
        return v

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level {v!r}")
        return v

    @field_validator("api_token", mode="before")
    @classmethod
    def blank_token_is_none(cls, v):
        """Treat an empty token as missing."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


def load_config(env_file: Optional[Path] = None) -> InboxConfig:
    """
    Load configuration from the environment.

    Variables already set in the process environment take priority over
    values from the ``.env`` file.

    Args:
        env_file: Path to a .env file (defaults to searching from the cwd)

    Returns:
        Validated InboxConfig

    Raises:
        ConfigError: If a value is invalid
    """
    if env_file is not None:
        load_dotenv(env_file, override=False)
    else:
        load_dotenv(find_dotenv(usecwd=True), override=False)

    values = {}
    for field_name in InboxConfig.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        if value is not None:
            values[field_name] = value

    try:
        return InboxConfig(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
