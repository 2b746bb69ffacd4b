"""
Entrypoint for the preview environment action.

Reads configuration from the environment (GitHub Action inputs are mapped to
environment variables by action.yml), runs the workflow and publishes outputs.
"""

import asyncio
import logging

from dotenv import load_dotenv
from pydantic import ValidationError

from preview_env.core.config import Settings
from preview_env.core.exceptions import PartialBatchFailure, PreviewEnvError
from preview_env.core.logging_config import (
    clear_run_id,
    configure_logging,
    set_run_id,
)
from preview_env.railway.client import RailwayClient
from preview_env.utils.github_actions import set_failed, set_output
from preview_env.workflow.service import PreviewWorkflow

logger = logging.getLogger(__name__)


async def run(settings: Settings) -> int:
    """Run the workflow once and report the outcome to the host. Returns the exit code."""
    set_run_id(settings.DEST_ENV_NAME)
    try:
        async with RailwayClient.from_settings(settings) as client:
            result = await PreviewWorkflow(settings, client).run()

        # railway_token is published by the workflow as soon as it is created
        if result.service_domain:
            set_output("service_domain", result.service_domain)

        if result.failed_batches and settings.FAIL_ON_PARTIAL_BATCH:
            raise PartialBatchFailure(result.failed_batches)

        logger.info(
            f"Preview environment '{result.environment.name}' is ready"
            + (f" at {result.service_domain}" if result.service_domain else "")
        )
        return 0
    except PreviewEnvError as e:
        logger.error(f"Preview environment workflow failed: {e}")
        set_failed(str(e))
        return 1
    except Exception as e:
        logger.exception("Unexpected error in preview environment workflow")
        set_failed(f"Unexpected error: {e}")
        return 1
    finally:
        clear_run_id()


def main() -> int:
    load_dotenv()
    try:
        settings = Settings()
    except ValidationError as e:
        set_failed(f"Invalid configuration: {e}")
        return 1

    configure_logging(settings)
    return asyncio.run(run(settings))


if __name__ == "__main__":
    raise SystemExit(main())
