"""
Deployment monitor: polls Railway until the latest deployment of an environment
reaches a terminal status.

Railway only exposes deployment progress through status reads, so the monitor
is a bounded poll with a fixed interval, driven by tenacity.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    before_sleep_log,
    retry_if_result,
    wait_fixed,
)

from preview_env.core.exceptions import (
    DeploymentFailed,
    MonitorTimeout,
    UnexpectedResponse,
)
from preview_env.railway.client import RailwayClient
from preview_env.railway.schemas import DeploymentStatus, IN_PROGRESS_STATUSES

logger = logging.getLogger(__name__)


class MonitorState(str, Enum):
    WATCHING = "WATCHING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"


def _in_progress(status: Optional[str]) -> bool:
    return status in IN_PROGRESS_STATUSES


class DeploymentMonitor:
    """Watches the most recent deployment of one environment."""

    def __init__(
        self,
        client: RailwayClient,
        project_id: str,
        poll_interval: float = 20.0,
        max_timeout: float = 600.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.project_id = project_id
        self.poll_interval = poll_interval
        self.max_timeout = max_timeout  # Seconds
        self._sleep = sleep
        self._clock = clock
        self._started: Optional[float] = None
        self.state = MonitorState.WATCHING

    def _timed_out(self, retry_state: RetryCallState) -> bool:
        return self._clock() - self._started > self.max_timeout

    async def _tick(self, environment_name: str) -> str:
        """Read the latest deployment status once and classify it."""
        environments = await self.client.list_environments(self.project_id)
        matches = [env for env in environments if env.name == environment_name]
        if not matches:
            raise UnexpectedResponse(
                f"Environment '{environment_name}' not found while monitoring its deployment"
            )

        deployment = matches[0].latest_deployment
        if deployment is None:
            raise UnexpectedResponse(
                f"No deployment found for environment '{environment_name}'"
            )

        status = deployment.status
        if status == DeploymentStatus.SUCCESS:
            return status

        if status == DeploymentStatus.FAILED:
            self.state = MonitorState.FAILED
            raise DeploymentFailed(
                f"Deployment {deployment.id} in '{environment_name}' failed. "
                "Please check the Railway dashboard for more information."
            )

        if _in_progress(status):
            logger.info(
                f"Deployment {deployment.id} is still in progress (status: {status}), "
                f"checking again in {self.poll_interval:g} seconds"
            )
            return status

        raise UnexpectedResponse(
            f"Unhandled deployment status '{status}' for deployment {deployment.id} "
            f"in '{environment_name}'"
        )

    async def wait_for_terminal(self, environment_name: str) -> MonitorState:
        """
        Poll until the latest deployment is terminal.

        Args:
            environment_name: Environment to watch, looked up by name on every tick

        Returns:
            MonitorState.SUCCEEDED

        Raises:
            DeploymentFailed: The latest deployment failed
            UnexpectedResponse: Unknown status or malformed response (not retried)
            MonitorTimeout: No terminal status within max_timeout
        """
        self.state = MonitorState.WATCHING
        self._started = self._clock()

        retrying = AsyncRetrying(
            retry=retry_if_result(_in_progress),
            wait=wait_fixed(self.poll_interval),
            stop=self._timed_out,
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.DEBUG),
        )

        try:
            await retrying(self._tick, environment_name)
        except RetryError as e:
            self.state = MonitorState.TIMED_OUT
            raise MonitorTimeout(
                f"Deployment in '{environment_name}' did not finish within "
                f"{self.max_timeout:g} seconds"
            ) from e

        self.state = MonitorState.SUCCEEDED
        logger.info(f"Deployment in '{environment_name}' finished successfully")
        return self.state
