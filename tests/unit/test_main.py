"""
Unit tests for the entrypoint: outputs and failure reporting to the host.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from preview_env.core.exceptions import IntegrityViolation
from preview_env.main import run
from preview_env.railway.schemas import Environment
from preview_env.utils.batch import BatchReport
from preview_env.workflow.service import WorkflowResult


def make_result(**overrides):
    values = dict(
        environment=Environment(id="env-1", name="pr-42"),
        created=True,
        project_token="tok-secret",
        service_domain="pr-42.up.railway.app",
    )
    values.update(overrides)
    return WorkflowResult(**values)


@pytest.fixture
def patched_workflow():
    with patch("preview_env.main.RailwayClient") as mock_client_cls, patch(
        "preview_env.main.PreviewWorkflow"
    ) as mock_workflow_cls:
        mock_client_cls.from_settings.return_value = MagicMock()
        mock_workflow_cls.return_value.run = AsyncMock()
        yield mock_workflow_cls.return_value.run


class TestRun:
    """Tests for main.run."""

    @pytest.mark.asyncio
    async def test_success_publishes_outputs(
        self, patched_workflow, settings_factory, tmp_path, monkeypatch
    ):
        output_file = tmp_path / "output"
        output_file.write_text("")
        monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))
        patched_workflow.return_value = make_result()

        exit_code = await run(settings_factory())

        assert exit_code == 0
        content = output_file.read_text()
        assert "service_domain<<" in content
        assert "pr-42.up.railway.app" in content
        # The token output belongs to the workflow, which publishes it on creation
        assert "railway_token" not in content

    @pytest.mark.asyncio
    async def test_fatal_error_reported_once(
        self, patched_workflow, settings_factory, capsys, monkeypatch
    ):
        monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
        patched_workflow.side_effect = IntegrityViolation("duplicate environments")

        exit_code = await run(settings_factory())

        assert exit_code == 1
        out = capsys.readouterr().out
        assert out.count("::error::") == 1
        assert "duplicate environments" in out

    @pytest.mark.asyncio
    async def test_unexpected_error_reported(
        self, patched_workflow, settings_factory, capsys, monkeypatch
    ):
        monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
        patched_workflow.side_effect = RuntimeError("kaboom")

        exit_code = await run(settings_factory())

        assert exit_code == 1
        assert capsys.readouterr().out.count("::error::") == 1

    @pytest.mark.asyncio
    async def test_partial_batch_failure_only_fatal_when_configured(
        self, patched_workflow, settings_factory, capsys, monkeypatch
    ):
        monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
        failed = BatchReport(name="redeploy", failed=[("web", RuntimeError("x"))])
        patched_workflow.return_value = make_result(batches=[failed])

        assert await run(settings_factory()) == 0
        assert await run(settings_factory(FAIL_ON_PARTIAL_BATCH=True)) == 1

        out = capsys.readouterr().out
        assert out.count("::error::") == 1
        # Outputs are still published before the failure is reported
        assert out.count("::set-output name=service_domain::") == 2


class TestRunWithWorkflow:
    """main.run driving the real workflow against the fake Railway client."""

    @pytest.mark.asyncio
    async def test_token_published_when_deployment_fails(
        self, fake_client, make_environment, settings_factory, tmp_path, capsys, monkeypatch
    ):
        """The rotated token reaches $GITHUB_OUTPUT even though the run fails."""
        output_file = tmp_path / "output"
        output_file.write_text("")
        monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))
        fake_client.environments = [make_environment("env-staging", "staging")]
        fake_client.created_environment = make_environment("env-new", "pr-42")
        # Resolver read, then the first monitor tick
        fake_client.status_sequence = ["QUEUED", "FAILED"]

        with patch("preview_env.main.RailwayClient") as mock_client_cls:
            mock_client_cls.from_settings.return_value = fake_client
            exit_code = await run(settings_factory(INITIAL_SETTLE_SECONDS=0))

        assert exit_code == 1
        assert list(fake_client.tokens) == ["tok-1"]
        content = output_file.read_text()
        assert "railway_token<<" in content
        assert "secret-tok-1" in content
        out = capsys.readouterr().out
        assert "::add-mask::secret-tok-1" in out
        assert out.count("::error::") == 1
