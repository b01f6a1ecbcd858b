# Copyright 2026 Canonical Ltd.
# See LICENSE file for licensing details.

"""Module containing application configuration for the github_runner_scaler library."""

from github_runner_scaler.configuration.base import (  # noqa: F401
    GitHubAppConfiguration,
    RunnerTypesConfiguration,
    ScaleUpConfiguration,
)
from github_runner_scaler.configuration.github import (  # noqa: F401
    GitHubOrg,
    GitHubPath,
    GitHubRepo,
    build_scope,
)
