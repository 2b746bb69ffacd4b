"""
Preview environment promotion workflow.

Order: resolve -> (propagate variables || rotate token) -> settle ->
wait for the initial deployment -> rebind triggers -> redeploy.
"""

import asyncio
import logging
import time
from functools import partial
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Tuple

from preview_env.core.config import Settings
from preview_env.core.exceptions import ConfigurationError
from preview_env.deployments.service import DeploymentMonitor, MonitorState
from preview_env.environments.service import EnvironmentResolver
from preview_env.railway.client import RailwayClient
from preview_env.railway.schemas import Environment
from preview_env.redeploy.service import RedeployCoordinator
from preview_env.tokens.service import TokenRotator
from preview_env.triggers.service import TriggerRebinder
from preview_env.utils.batch import BatchReport
from preview_env.utils.github_actions import publish_secret_output
from preview_env.variables.service import VariablePropagator, parse_variables

logger = logging.getLogger(__name__)


@dataclass
class WorkflowResult:
    environment: Environment
    created: bool
    project_token: str
    service_domain: Optional[str] = None
    monitor_state: Optional[MonitorState] = None
    batches: List[BatchReport] = field(default_factory=list)

    @property
    def failed_batches(self) -> List[BatchReport]:
        return [batch for batch in self.batches if not batch.ok]


class PreviewWorkflow:
    """Runs the full promotion against one destination environment."""

    def __init__(
        self,
        settings: Settings,
        client: RailwayClient,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
        publish_secret: Callable[[str], None] = partial(
            publish_secret_output, "railway_token"
        ),
    ):
        self.settings = settings
        self.client = client
        self._sleep = sleep
        self._publish_secret = publish_secret

        self.resolver = EnvironmentResolver(client)
        self.propagator = VariablePropagator(client, settings.PROJECT_ID)
        self.rotator = TokenRotator(
            client, settings.PROJECT_ID, token_name=settings.token_name_for
        )
        self.monitor = DeploymentMonitor(
            client,
            settings.PROJECT_ID,
            poll_interval=settings.POLL_INTERVAL_SECONDS,
            max_timeout=settings.max_timeout_seconds,
            sleep=sleep,
            clock=clock,
        )
        self.rebinder = TriggerRebinder(client)
        self.redeployer = RedeployCoordinator(client)

    async def _propagate_and_rotate(
        self, environment: Environment
    ) -> Tuple[BatchReport, str]:
        """Run variable propagation and token rotation side by side."""

        async def rotate() -> str:
            token = await self.rotator.rotate(environment)
            # The old token is already deleted, so publish the new one right away
            self._publish_secret(token)
            return token

        variables_result, token_result = await asyncio.gather(
            self.propagator.propagate(
                environment.id, environment.service_instances, self.settings.ENV_VARS
            ),
            rotate(),
            return_exceptions=True,
        )

        # Both have settled; surface the first fatal error
        for result in (token_result, variables_result):
            if isinstance(result, BaseException):
                raise result
        return variables_result, token_result

    async def run(self) -> WorkflowResult:
        settings = self.settings

        # Free-form inputs are validated before any mutating call
        exclusions = settings.ignored_services
        parse_variables(settings.ENV_VARS)

        environment, created = await self.resolver.resolve(
            project_id=settings.PROJECT_ID,
            dest_name=settings.DEST_ENV_NAME,
            src_name=settings.SRC_ENVIRONMENT_NAME,
            src_id=settings.SRC_ENVIRONMENT_ID,
        )

        variables_report, token = await self._propagate_and_rotate(environment)

        if created and settings.INITIAL_SETTLE_SECONDS > 0:
            logger.info(
                f"Waiting {settings.INITIAL_SETTLE_SECONDS:g} seconds for the initial deployment to initialize"
            )
            await self._sleep(settings.INITIAL_SETTLE_SECONDS)

        monitor_state = await self.monitor.wait_for_terminal(environment.name)

        trigger_report = await self.rebinder.rebind(
            [trigger.id for trigger in environment.deployment_triggers],
            settings.BRANCH_NAME,
        )

        domain, redeploy_report = await self.redeployer.coordinate(
            environment.id,
            environment.service_instances,
            exclusions,
            settings.API_SERVICE_NAME,
        )

        if domain is None and settings.REQUIRE_SERVICE_DOMAIN:
            raise ConfigurationError(
                "No service domain found; set API_SERVICE_NAME to a service with a public domain"
            )

        result = WorkflowResult(
            environment=environment,
            created=created,
            project_token=token,
            service_domain=domain,
            monitor_state=monitor_state,
            batches=[variables_report, trigger_report, redeploy_report],
        )
        for batch in result.failed_batches:
            logger.warning(
                f"Batch '{batch.name}' partially failed: "
                f"{len(batch.failed)}/{batch.total} ({', '.join(batch.failed_labels)})"
            )
        return result
