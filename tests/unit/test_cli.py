from unittest.mock import AsyncMock, MagicMock, patch

from click.testing import CliRunner

from driverdesk.cli import cli
from driverdesk.core.config import Settings


def sqlite_settings(**overrides) -> Settings:
    values = {"database_url": "sqlite+aiosqlite:///./dd_data/driverdesk.db", "environment": "testing"}
    values.update(overrides)
    return Settings(**values)


def test_serve_rejects_multiple_workers_on_sqlite():
    runner = CliRunner()

    with patch("driverdesk.cli.get_settings", return_value=sqlite_settings()), patch(
        "uvicorn.run"
    ) as mock_run:
        result = runner.invoke(cli, ["serve", "--workers", "2", "--no-reload"])

    assert result.exit_code == 1
    assert "SQLite does not support multiple worker processes" in result.output
    mock_run.assert_not_called()


def test_serve_starts_uvicorn():
    runner = CliRunner()

    with patch("driverdesk.cli.get_settings", return_value=sqlite_settings()), patch(
        "driverdesk.cli.configure_logging"
    ), patch("uvicorn.run") as mock_run:
        result = runner.invoke(cli, ["serve", "--port", "9001", "--no-reload"])

    assert result.exit_code == 0
    args, kwargs = mock_run.call_args
    assert args[0] == "driverdesk.infrastructure.api.app:app"
    assert kwargs["port"] == 9001
    assert kwargs["reload"] is False


def test_expire_invitations_reports_count():
    runner = CliRunner()
    session = MagicMock()
    db = MagicMock()
    db.session.return_value.__aenter__ = AsyncMock(return_value=session)
    db.session.return_value.__aexit__ = AsyncMock(return_value=False)
    db.disconnect = AsyncMock()

    with patch("driverdesk.cli.get_settings", return_value=sqlite_settings()), patch(
        "driverdesk.cli.configure_logging"
    ), patch(
        "driverdesk.infrastructure.persistence.database.get_db_manager", return_value=db
    ), patch(
        "driverdesk.domain.services.DriverInvitationService.expire_stale_invitations",
        new=AsyncMock(return_value=3),
    ):
        result = runner.invoke(cli, ["expire-invitations"])

    assert result.exit_code == 0
    assert "Expired 3 invitation(s)." in result.output
    db.disconnect.assert_awaited_once()


def test_info_shows_configuration():
    runner = CliRunner()

    with patch(
        "driverdesk.cli.get_settings",
        return_value=sqlite_settings(email_provider="console", invitation_expiry_days=5),
    ):
        result = runner.invoke(cli, ["info"])

    assert result.exit_code == 0
    assert "Expiry:       5 days" in result.output
    assert "Provider:     console" in result.output


def test_check_email_reports_unreachable_provider():
    runner = CliRunner()
    provider = MagicMock()
    provider.name = "smtp"
    provider.test_connection = AsyncMock(return_value=(False, "SMTP connection failed: refused"))
    email_service = MagicMock(provider=provider)

    with patch("driverdesk.cli.configure_logging"), patch(
        "driverdesk.infrastructure.services.email.get_email_service", return_value=email_service
    ):
        result = runner.invoke(cli, ["check-email"])

    assert result.exit_code == 1
    assert "unreachable: SMTP connection failed: refused" in result.output


def test_check_email_with_console_provider():
    runner = CliRunner()

    with patch("driverdesk.cli.configure_logging"):
        result = runner.invoke(cli, ["check-email"])

    assert result.exit_code == 0
    assert "Email provider 'console' is reachable." in result.output
