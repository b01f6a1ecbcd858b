# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""Base configuration for the runner scaler."""

import base64
import binascii
import logging
import os
from typing import Any, Mapping, TextIO

import yaml
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, field_validator, model_validator

from github_runner_scaler.models import RunnerType, check_label

logger = logging.getLogger(__name__)

GITHUB_BASE_URL = "https://github.com"
GHES_API_PATH = "/api/v3"

_TRUTHY_VALUES = frozenset(("y", "yes", "true", "1", "on"))
_FALSY_VALUES = frozenset(("n", "no", "false", "0", "off"))


def _parse_bool(value: str | None, default: bool) -> bool:
    """Parse a yes/no style boolean.

    Args:
        value: The value to parse.
        default: Value returned when the value is unset or not recognised.

    Returns:
        The parsed boolean.
    """
    if value is None or not value.strip():
        return default
    normalized = value.strip().lower()
    if normalized in _TRUTHY_VALUES:
        return True
    if normalized in _FALSY_VALUES:
        return False
    logger.warning("Unrecognised boolean value %r, using default %s", value, default)
    return default


def _get_env(env: Mapping[str, str], name: str) -> str | None:
    """Get an environment variable, treating empty values as unset.

    Args:
        env: The environment to read from.
        name: Name of the environment variable.

    Returns:
        The value of the variable, None if it is unset or empty.
    """
    value = env.get(name)
    return value if value else None


class ScaleUpConfiguration(BaseModel):
    """Configuration for the scale up decisions.

    Attributes:
        enable_organization_runners: Whether runners are registered to the organization
            instead of the repository.
        runner_extra_labels: Labels added to every runner on top of the runner type name.
        runner_group_name: Runner group of organization runners.
        environment: Deployment environment the runners belong to.
        ghes_url: Base URL of a GitHub Enterprise Server. None for github.com.
        api_url: URL of the GitHub API, None for the default github.com API.
        config_base_url: Base URL runners register against.
    """

    model_config = ConfigDict(frozen=True)

    enable_organization_runners: bool = True
    runner_extra_labels: list[str] = Field(default_factory=list)
    runner_group_name: str | None = None
    environment: str
    ghes_url: AnyHttpUrl | None = None

    @field_validator("runner_extra_labels")
    @classmethod
    def check_runner_extra_labels(cls, runner_extra_labels: list[str]) -> list[str]:
        """Validate each extra label can be passed in the comma separated label list.

        Args:
            runner_extra_labels: The extra labels.

        Returns:
            The validated extra labels.
        """
        return [check_label(label) for label in runner_extra_labels]

    @property
    def api_url(self) -> str | None:
        """Return the URL of the GitHub API."""
        if self.ghes_url is None:
            return None
        return f"{str(self.ghes_url).rstrip('/')}{GHES_API_PATH}"

    @property
    def config_base_url(self) -> str:
        """Return the base URL runners register against."""
        if self.ghes_url is None:
            return GITHUB_BASE_URL
        return str(self.ghes_url).rstrip("/")

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ScaleUpConfiguration":
        """Initialize configuration from environment variables.

        Args:
            env: The environment to read from. Defaults to the process environment.

        Returns:
            The configuration.
        """
        env = os.environ if env is None else env
        extra_labels = _get_env(env, "RUNNER_EXTRA_LABELS") or ""
        return cls(
            enable_organization_runners=_parse_bool(
                env.get("ENABLE_ORGANIZATION_RUNNERS"), default=True
            ),
            runner_extra_labels=[
                label.strip() for label in extra_labels.split(",") if label.strip()
            ],
            runner_group_name=_get_env(env, "RUNNER_GROUP_NAME"),
            environment=env.get("ENVIRONMENT", ""),
            ghes_url=_get_env(env, "GHES_URL"),
        )


class RunnerTypesConfiguration(BaseModel):
    """The runner types the scaler can provision.

    Attributes:
        runner_types: Runner types by name.
    """

    model_config = ConfigDict(frozen=True)

    runner_types: dict[str, RunnerType]

    @model_validator(mode="before")
    @classmethod
    def fill_runner_type_names(cls, data: Any) -> Any:
        """Default the name of each runner type to its key.

        Args:
            data: The raw configuration.

        Returns:
            The raw configuration with the runner type names.
        """
        if isinstance(data, dict) and isinstance(data.get("runner_types"), dict):
            runner_types = {}
            for name, runner_type in data["runner_types"].items():
                if isinstance(runner_type, dict):
                    runner_type = {"runner_type_name": name, **runner_type}
                runner_types[name] = runner_type
            data = {**data, "runner_types": runner_types}
        return data

    @model_validator(mode="after")
    def check_runner_type_names(self) -> "RunnerTypesConfiguration":
        """Validate each runner type is keyed by its name.

        Raises:
            ValueError: if a key does not match the runner type name.

        Returns:
            The validated configuration.
        """
        for name, runner_type in self.runner_types.items():
            if name != runner_type.runner_type_name:
                raise ValueError(
                    f"Runner type {runner_type.runner_type_name} is configured under name {name}"
                )
        return self

    @staticmethod
    def from_yaml_file(file: TextIO) -> "RunnerTypesConfiguration":
        """Initialize configuration from a YAML formatted file.

        Args:
            file: The file object to parse the configuration from.

        Returns:
            The configuration.
        """
        config = yaml.safe_load(file)
        return RunnerTypesConfiguration.model_validate(config)


class GitHubAppConfiguration(BaseModel):
    """Credentials of the GitHub App.

    Attributes:
        app_id: ID of the GitHub App.
        private_key: PEM encoded private key of the GitHub App.
    """

    model_config = ConfigDict(frozen=True)

    app_id: int
    private_key: str = Field(repr=False)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "GitHubAppConfiguration":
        """Initialize configuration from environment variables.

        Args:
            env: The environment to read from. Defaults to the process environment.

        Raises:
            ValueError: If the private key is not valid base64.

        Returns:
            The configuration.
        """
        env = os.environ if env is None else env
        try:
            private_key = base64.b64decode(env["GITHUB_APP_KEY_BASE64"], validate=True)
        except (binascii.Error, KeyError) as exc:
            raise ValueError("GITHUB_APP_KEY_BASE64 must be a base64 encoded key") from exc
        return cls(app_id=env.get("GITHUB_APP_ID", ""), private_key=private_key.decode())
