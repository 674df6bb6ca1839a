"""
Unit tests for the one-shot front-end.

parse_action and perform are tested in isolation (perform against a
MagicMock repository); the click command is driven with CliRunner.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from cert_registry.cli import AddAction, CheckAction, main, parse_action, perform
from cert_registry.domain.models import Certificate
from cert_registry.railway import ErrorCode, Result, ResultAssertions

# ─────────────────────── parse_action ───────────────────────


class TestParseAction:
    def test_add_builds_certificate(self) -> None:
        result = parse_action(True, False, "SN001", "AcmeCA", "bootloader,kernel")

        ResultAssertions.assert_success_value(
            result, AddAction(Certificate("SN001", "AcmeCA", ("bootloader", "kernel")))
        )

    def test_check_needs_only_serial(self) -> None:
        ResultAssertions.assert_success_value(
            parse_action(False, True, "SN001", None, None), CheckAction("SN001")
        )

    def test_both_actions_is_argument_error(self) -> None:
        result = parse_action(True, True, "SN001", "AcmeCA", "kernel")
        ResultAssertions.assert_failure(result, ErrorCode.ARGUMENT_ERROR)
        ResultAssertions.assert_failure_message_contains(result, "only one")

    def test_no_action_is_argument_error(self) -> None:
        ResultAssertions.assert_failure(
            parse_action(False, False, "SN001", None, None), ErrorCode.ARGUMENT_ERROR
        )

    @pytest.mark.parametrize(
        ("serial", "signer", "components"),
        [(None, "AcmeCA", "kernel"), ("SN001", "", "kernel"), ("SN001", "AcmeCA", None)],
    )
    def test_add_requires_all_values(
        self, serial: str | None, signer: str | None, components: str | None
    ) -> None:
        ResultAssertions.assert_failure(
            parse_action(True, False, serial, signer, components), ErrorCode.ARGUMENT_ERROR
        )

    def test_check_requires_serial(self) -> None:
        ResultAssertions.assert_failure(
            parse_action(False, True, "  ", None, None), ErrorCode.ARGUMENT_ERROR
        )


# ─────────────────────── perform ───────────────────────


class TestPerform:
    def test_add_inserts_and_reports(self) -> None:
        repo = MagicMock()
        cert = Certificate("SN001", "AcmeCA", ("kernel",))
        repo.insert_certificate.return_value = Result.success(cert)

        result = perform(repo, AddAction(cert))

        repo.insert_certificate.assert_called_once_with(cert)
        ResultAssertions.assert_success_value(result, "Certificate SN001 added.")

    def test_check_reports_presence(self) -> None:
        repo = MagicMock()
        repo.certificate_exists.return_value = Result.success(False)

        result = perform(repo, CheckAction("SN999"))

        ResultAssertions.assert_success_value(
            result, "Certificate with serial number SN999 does not exist."
        )

    def test_repository_failure_propagates(self) -> None:
        repo = MagicMock()
        repo.insert_certificate.return_value = Result.failure(
            ErrorCode.CONSTRAINT_VIOLATION, "Certificate with serial number SN001 already exists"
        )

        result = perform(repo, AddAction(Certificate("SN001", "AcmeCA", ("kernel",))))

        ResultAssertions.assert_failure(result, ErrorCode.CONSTRAINT_VIOLATION)


# ─────────────────────── click command ───────────────────────


class TestMain:
    def test_add_then_check(self, tmp_path: Path) -> None:
        """
        GIVEN an empty database
        WHEN -add is run and then -check for the same serial
        THEN both exit 0 with their result lines.
        """
        db = str(tmp_path / "certs.db")
        runner = CliRunner()

        added = runner.invoke(
            main,
            ["-add", "-serial", "SN001", "-signer", "AcmeCA", "-components", "bootloader,kernel", "--db", db],
        )
        checked = runner.invoke(main, ["-check", "-serial", "SN001", "--db", db])

        assert added.exit_code == 0, added.output
        assert added.output.strip() == "Certificate SN001 added."
        assert checked.exit_code == 0, checked.output
        assert checked.output.strip() == "Certificate with serial number SN001 exists."

    def test_double_dash_flags_are_accepted(self) -> None:
        result = CliRunner().invoke(main, ["--check", "--serial", "SN999"])

        assert result.exit_code == 0
        assert result.output.strip() == "Certificate with serial number SN999 does not exist."

    def test_defaults_to_certificates_file(self, tmp_path: Path) -> None:
        CliRunner().invoke(main, ["-check", "-serial", "SN001"])

        assert (tmp_path / "certificates.db").exists()

    def test_both_actions_exit_1_without_touching_repository(self) -> None:
        """
        GIVEN both -add and -check
        WHEN the command runs
        THEN usage is printed, exit code is 1, and no repository is opened.
        """
        with patch("cert_registry.cli.open_repository") as open_repository:
            result = CliRunner().invoke(
                main, ["-add", "-check", "-serial", "SN001", "-signer", "A", "-components", "k"]
            )

        assert result.exit_code == 1
        assert "Specify only one of -add or -check" in result.output
        assert "Usage:" in result.output
        open_repository.assert_not_called()

    def test_no_action_exits_1(self) -> None:
        result = CliRunner().invoke(main, ["-serial", "SN001"])

        assert result.exit_code == 1
        assert "Usage:" in result.output

    def test_add_missing_components_exits_1(self) -> None:
        result = CliRunner().invoke(main, ["-add", "-serial", "SN001", "-signer", "AcmeCA"])

        assert result.exit_code == 1
        assert "Components is required" in result.output

    def test_duplicate_add_is_fatal(self, tmp_path: Path) -> None:
        db = str(tmp_path / "certs.db")
        args = ["-add", "-serial", "SN001", "-signer", "AcmeCA", "-components", "kernel", "--db", db]
        runner = CliRunner()
        runner.invoke(main, args)

        result = runner.invoke(main, args)

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_duplicate_add_is_reported_once(self, tmp_path: Path) -> None:
        """
        GIVEN the default log level and a stored SN001
        WHEN -add runs again for SN001
        THEN the combined output carries the rejection exactly once.
        """
        db = str(tmp_path / "certs.db")
        args = ["-add", "-serial", "SN001", "-signer", "AcmeCA", "-components", "kernel", "--db", db]
        runner = CliRunner()
        runner.invoke(main, args)

        result = runner.invoke(main, args)

        assert result.exit_code == 1
        assert result.output.count("already exists") == 1
        assert "insert_rejected" not in result.output
        assert "cli.fatal" not in result.output

    def test_unreachable_database_is_fatal(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            main, ["-check", "-serial", "SN001", "--db", str(tmp_path / "missing" / "certs.db")]
        )

        assert result.exit_code == 1
        assert "Failed to initialize database" in result.output

    def test_repository_is_closed_after_failure(self) -> None:
        repository = MagicMock()
        repository.__enter__.return_value = repository
        repository.insert_certificate.return_value = Result.failure(
            ErrorCode.CONSTRAINT_VIOLATION, "duplicate"
        )

        with patch("cert_registry.cli.open_repository", return_value=Result.success(repository)):
            result = CliRunner().invoke(
                main, ["-add", "-serial", "SN001", "-signer", "AcmeCA", "-components", "kernel"]
            )

        assert result.exit_code == 1
        repository.__exit__.assert_called_once()
