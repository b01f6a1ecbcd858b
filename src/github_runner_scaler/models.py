# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""Module containing the main classes for the scale up decision."""

import shlex
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from github_runner_scaler.types_.github import CheckRunStatus

LABEL_SEPARATOR = ","


def check_label(label: str) -> str:
    """Validate a runner label can be passed in the comma separated label list.

    Args:
        label: The runner label.

    Raises:
        ValueError: If the label is empty, contains a comma or whitespace.

    Returns:
        The label.
    """
    if not label:
        raise ValueError("Runner label must not be empty")
    if LABEL_SEPARATOR in label or any(char.isspace() for char in label):
        raise ValueError(f"Runner label {label!r} must not contain commas or whitespace")
    return label


class ActionRequestMessage(BaseModel):
    """The event requesting a runner for a queued check run.

    Attributes:
        id: Identifier of the check run.
        event_type: Type of the GitHub event that produced the message.
        repository_name: Name of the repository of the check run.
        repository_owner: Owner of the repository of the check run.
        installation_id: GitHub App installation id. 0 if it is unknown to the producer.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    event_type: str = Field(alias="eventType")
    repository_name: str = Field(alias="repositoryName")
    repository_owner: str = Field(alias="repositoryOwner")
    installation_id: int = Field(0, alias="installationId", ge=0)


class RunnerType(BaseModel):
    """A category of runner with its own machine profile and capacity.

    The name of the runner type is also the label the runners register with.

    Attributes:
        runner_type_name: Name of the runner type.
        instance_type: Compute profile of the instances.
        os: Operating system of the instances.
        ami_filter: Filter used to select the base image.
        disk_size: Disk size of the instances in GB.
        min_available: Number of runners aimed to keep available.
        max_available: Maximum number of runners of this type.
    """

    model_config = ConfigDict(frozen=True)

    runner_type_name: str = Field(min_length=1)
    instance_type: str
    os: Literal["linux", "windows"]
    ami_filter: str
    disk_size: int = Field(gt=0)
    min_available: int = Field(ge=0)
    max_available: int = Field(ge=0)

    @field_validator("runner_type_name")
    @classmethod
    def check_runner_type_name(cls, runner_type_name: str) -> str:
        """Validate the name can be used as a runner label.

        Args:
            runner_type_name: The name of the runner type.

        Returns:
            The validated name.
        """
        return check_label(runner_type_name)

    @model_validator(mode="after")
    def check_available_bounds(self) -> "RunnerType":
        """Validate the minimum does not exceed the maximum.

        Raises:
            ValueError: if min_available is greater than max_available.

        Returns:
            The validated runner type.
        """
        if self.min_available > self.max_available:
            raise ValueError(
                f"min_available ({self.min_available}) of {self.runner_type_name} is greater "
                f"than max_available ({self.max_available})"
            )
        return self


@dataclass(frozen=True)
class RunnerRecord:
    """A runner tracked by the runner inventory.

    Attributes:
        runner_type: Name of the runner type of the runner.
        instance_id: Identifier of the instance backing the runner.
        org: Organization the runner is registered to.
        repo: Repository the runner is registered to, in the format '<owner>/<repo>'.
        launch_time: Time the instance was launched.
    """

    runner_type: str
    instance_id: str | None = None
    org: str | None = None
    repo: str | None = None
    launch_time: datetime | None = None


@dataclass(frozen=True)
class RunnerConfig:
    """Arguments for the runner application to register with GitHub.

    Attributes:
        url: URL of the organization or repository to register to.
        token: Single use registration token.
        labels: Labels of the runner.
        runner_group: Runner group to register to, only for organizations.
    """

    url: str
    token: str = field(repr=False)
    labels: list[str]
    runner_group: str | None = None

    def __post_init__(self) -> None:
        """Validate the labels survive composing the configuration arguments."""
        for label in self.labels:
            check_label(label)

    def __str__(self) -> str:
        """Compose the configuration arguments.

        Returns:
            The arguments of the runner configuration command.
        """
        config = (
            f"--url {shlex.quote(self.url)} --token {shlex.quote(self.token)} "
            f"--labels {shlex.quote(LABEL_SEPARATOR.join(self.labels))}"
        )
        if self.runner_group is not None:
            config += f" --runnergroup {shlex.quote(self.runner_group)}"
        return config

    @classmethod
    def parse(cls, config: str) -> "RunnerConfig":
        """Recreate the configuration from the configuration arguments.

        Args:
            config: The arguments of the runner configuration command.

        Raises:
            ValueError: If an argument is unknown or a required one is missing.

        Returns:
            The runner configuration.
        """
        args: dict[str, str] = {}
        tokens = shlex.split(config)
        if len(tokens) % 2:
            raise ValueError("Runner configuration arguments must be in '--name value' pairs")
        for name, value in zip(tokens[::2], tokens[1::2]):
            if name not in ("--url", "--token", "--labels", "--runnergroup"):
                raise ValueError(f"Unknown runner configuration argument {name}")
            args[name.removeprefix("--")] = value
        try:
            return cls(
                url=args["url"],
                token=args["token"],
                labels=args["labels"].split(LABEL_SEPARATOR),
                runner_group=args.get("runnergroup"),
            )
        except KeyError as exc:
            raise ValueError(f"Missing runner configuration argument --{exc.args[0]}") from exc


@dataclass(frozen=True)
class CreateRunnerRequest:
    """Request to the provisioner to create one runner.

    Exactly one of org_name and repo_name is set.

    Attributes:
        environment: Deployment environment the runner belongs to.
        runner_config: Configuration for the runner application.
        runner_type: The runner type to create.
        org_name: Organization the runner is registered to.
        repo_name: Repository the runner is registered to, in the format '<owner>/<repo>'.
    """

    environment: str
    runner_config: RunnerConfig
    runner_type: RunnerType
    org_name: str | None = None
    repo_name: str | None = None


@dataclass
class ScaleUpResult:
    """The outcome of a scale up decision.

    Attributes:
        check_run_status: Status of the check run that triggered the decision.
        created: Runner types a runner was created for.
        at_capacity: Runner types at their maximum number of runners.
        idle_available: Runner types with an idle runner available.
    """

    check_run_status: CheckRunStatus
    created: list[str] = field(default_factory=list)
    at_capacity: list[str] = field(default_factory=list)
    idle_available: list[str] = field(default_factory=list)
