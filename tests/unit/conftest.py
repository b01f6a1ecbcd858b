#  Copyright 2026 Canonical Ltd.
#  See LICENSE file for licensing details.

"""Unit test setups and configurations."""

from unittest.mock import MagicMock

import pytest

from github_runner_scaler.configuration import RunnerTypesConfiguration, ScaleUpConfiguration
from github_runner_scaler.types_.github import CheckRunStatus
from tests.unit.fake_collaborators import FakeRunnerInventory, FakeRunnerProvisioner


@pytest.fixture(name="runner_types")
def runner_types_fixture() -> RunnerTypesConfiguration:
    """The runner types of the scaler."""
    return RunnerTypesConfiguration.model_validate(
        {
            "runner_types": {
                "linux.2xlarge": {
                    "instance_type": "c5.2xlarge",
                    "os": "linux",
                    "ami_filter": "amzn2-ami-hvm-2.0*x86_64-ebs",
                    "max_available": 200,
                    "min_available": 10,
                    "disk_size": 100,
                },
                "win.2xlarge": {
                    "instance_type": "c5.2xlarge",
                    "os": "windows",
                    "ami_filter": "Windows_Server-2019-English-Core*",
                    "max_available": 50,
                    "min_available": 10,
                    "disk_size": 100,
                },
            }
        }
    )


@pytest.fixture(name="scale_up_config")
def scale_up_config_fixture() -> ScaleUpConfiguration:
    """Organization level configuration without extra labels or runner group."""
    return ScaleUpConfiguration(environment="test-env")


@pytest.fixture(name="inventory")
def inventory_fixture() -> FakeRunnerInventory:
    """An empty runner inventory."""
    return FakeRunnerInventory()


@pytest.fixture(name="provisioner")
def provisioner_fixture() -> FakeRunnerProvisioner:
    """A provisioner recording the requests."""
    return FakeRunnerProvisioner()


@pytest.fixture(name="auth")
def auth_fixture() -> MagicMock:
    """A GitHub auth handing out fixed tokens."""
    auth = MagicMock()
    auth.get_app_token.return_value = "app-jwt"
    auth.get_installation_token.return_value = "installation-token"
    return auth


@pytest.fixture(name="github_client")
def github_client_fixture() -> MagicMock:
    """A GitHub client for a queued check run without any runner on GitHub."""
    github_client = MagicMock()
    github_client.get_check_run_status.return_value = CheckRunStatus.QUEUED
    github_client.list_runners.return_value = []
    github_client.get_runner_registration_token.return_value = "registration-token"
    github_client.get_org_installation_id.return_value = 42
    github_client.get_repo_installation_id.return_value = 43
    return github_client


@pytest.fixture(name="client_factory")
def client_factory_fixture(github_client: MagicMock) -> MagicMock:
    """A GitHub client factory always returning the mocked client."""
    return MagicMock(return_value=github_client)
