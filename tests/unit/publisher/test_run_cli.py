"""Tests for the command-line entry point."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import run
from publisher.errors import RemoteWriteRejected
from publisher.models.types import (
    CommitResult,
    Provider,
    RepositoryMode,
    RepositoryRef,
    VerificationOutcome,
)
from publisher.publish_service import PublishReport


@pytest.fixture
def quiet_logging():
    with patch("run.configure_logging"):
        yield


def _service(report=None, error=None):
    service = MagicMock()
    service.publish = AsyncMock(return_value=report, side_effect=error)
    return service


class TestParser:
    def test_create_and_existing_are_exclusive(self):
        with pytest.raises(SystemExit):
            run.build_parser().parse_args(
                ["--provider", "github", "--create", "a", "--existing", "o/a", "f.json"]
            )

    def test_defaults(self):
        args = run.build_parser().parse_args(["--provider", "gitlab", "--existing", "g/demo", "a.json"])

        assert args.message == "Create Pipeline Config"
        assert args.no_verify is False
        assert args.files == ["a.json"]


class TestMain:
    def test_successful_publish(self, quiet_logging, capsys):
        report = PublishReport(
            repository=RepositoryRef(Provider.GITHUB, "octo/demo"),
            commit=CommitResult(committed=True, remote_commit_id="BBB"),
            verification=VerificationOutcome(found=True, attempts_used=2),
        )
        service = _service(report=report)

        with patch("run.PublishService.for_provider", return_value=service) as for_provider:
            code = run.main(["--provider", "GitHub", "--create", "demo", "collection.json"])

        assert code == 0
        for_provider.assert_called_once_with(Provider.GITHUB)
        service.publish.assert_awaited_once_with(
            "demo",
            RepositoryMode.CREATE_NEW,
            ["collection.json"],
            message="Create Pipeline Config",
            verify=True,
        )
        out = capsys.readouterr().out
        assert "octo/demo" in out
        assert "BBB" in out
        assert "registered after 2 attempts" in out

    def test_publish_error_returns_nonzero(self, quiet_logging, capsys):
        error = RemoteWriteRejected("PATCH", "https://api.github.test/x", 422, "not a fast forward")
        error.step = "update branch ref"
        service = _service(error=error)

        with patch("run.PublishService.for_provider", return_value=service):
            code = run.main(
                ["--provider", "github", "--existing", "octo/demo", "--no-verify", "a.json"]
            )

        assert code == 1
        err = capsys.readouterr().err
        assert "update branch ref" in err
        assert "not a fast forward" in err
        _, kwargs = service.publish.call_args
        assert kwargs["verify"] is False

    def test_unknown_provider(self, quiet_logging, capsys):
        code = run.main(["--provider", "svn", "--create", "demo", "a.json"])

        assert code == 1
        assert "svn" in capsys.readouterr().err
