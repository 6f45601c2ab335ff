"""Tests for the CLI entry points."""

from unittest.mock import patch

import httpx
from typer.testing import CliRunner

from clinicrelay import __version__
from clinicrelay.auth.manager import CredentialsManager
from clinicrelay.cli.main import app


runner = CliRunner()


def fake_manager_factory(settings, clinic_api):
    def factory() -> CredentialsManager:
        client = httpx.AsyncClient(transport=httpx.MockTransport(clinic_api.handler))
        manager = CredentialsManager(settings, http_client=client)
        manager._owns_http_client = True
        return manager

    return factory


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_auth_check_success(settings, clinic_api) -> None:
    with (
        patch("clinicrelay.cli.commands.auth.get_settings", return_value=settings),
        patch(
            "clinicrelay.cli.commands.auth.get_credentials_manager",
            side_effect=fake_manager_factory(settings, clinic_api),
        ),
    ):
        result = runner.invoke(app, ["auth", "check"])

    assert result.exit_code == 0, result.stdout
    assert "Token acquired and validated" in result.stdout
    assert "access-1" not in result.stdout
    assert len(clinic_api.token_requests) == 1


def test_auth_check_failure(settings_factory, clinic_api) -> None:
    settings = settings_factory(refresh_token=None)

    with (
        patch("clinicrelay.cli.commands.auth.get_settings", return_value=settings),
        patch(
            "clinicrelay.cli.commands.auth.get_credentials_manager",
            side_effect=fake_manager_factory(settings, clinic_api),
        ),
    ):
        result = runner.invoke(app, ["auth", "check"])

    assert result.exit_code == 1
    assert "NoCredentialAvailableError" in result.stdout
    assert clinic_api.call_count == 0
