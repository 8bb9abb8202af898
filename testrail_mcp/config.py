"""
Process-wide configuration loaded once at startup.

Values come from environment variables, optionally seeded from a ``.env``
file in the working directory:

    TESTRAIL_URL       TestRail instance root, e.g. https://company.testrail.io
    TESTRAIL_USER      Username / email of the API user
    TESTRAIL_API_KEY   API key (My Settings > API Keys) or password
    MCP_SERVER_NAME    Name reported to MCP clients (default: TestRail)
    LOG_LEVEL          DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
    LOG_FILE           Optional log file path; a date is inserted before .log
"""

import os
from typing import Mapping, Optional
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError
from .gateway import normalize_base_url

ENV_VARS = {
    "base_url": "TESTRAIL_URL",
    "username": "TESTRAIL_USER",
    "api_key": "TESTRAIL_API_KEY",
    "server_name": "MCP_SERVER_NAME",
    "log_level": "LOG_LEVEL",
    "log_file": "LOG_FILE",
}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TestRailSettings(BaseModel):
    """Immutable settings shared by the gateway and the server."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(description="TestRail instance URL")
    username: str = Field(min_length=1, description="TestRail username/email")
    api_key: str = Field(min_length=1, repr=False, description="TestRail API key")
    server_name: str = "TestRail"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        parsed = urlparse(value.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("TestRail URL must be a valid http(s) URL")
        return normalize_base_url(value)

    @field_validator("username", "api_key")
    @classmethod
    def _strip_credentials(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return value


def load_settings(environ: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> TestRailSettings:
    """
    Build settings from the environment.

    Raises:
        ConfigurationError: listing every missing or invalid value
    """
    if environ is None:
        if dotenv:
            load_dotenv()
        environ = os.environ

    values = {}
    for field_name, env_name in ENV_VARS.items():
        raw = environ.get(env_name)
        if raw is not None and raw != "":
            values[field_name] = raw

    try:
        return TestRailSettings(**values)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            field_name = err["loc"][0] if err["loc"] else ""
            env_name = ENV_VARS.get(field_name, field_name)
            if err["type"] == "missing":
                problems.append(f"{env_name}: is required")
            else:
                problems.append(f"{env_name}: {err['msg']}")
        raise ConfigurationError(problems) from e
