"""
Service layer for resolving the destination environment.
"""

import logging
from typing import List, Optional, Tuple

from preview_env.core.exceptions import ConfigurationError, IntegrityViolation
from preview_env.railway.client import RailwayClient
from preview_env.railway.schemas import Environment

logger = logging.getLogger(__name__)


class EnvironmentResolver:
    """Finds the destination environment or clones it from a source."""

    def __init__(self, client: RailwayClient):
        self.client = client

    @staticmethod
    def _by_name(environments: List[Environment], name: str) -> List[Environment]:
        return [env for env in environments if env.name == name]

    def _resolve_source_id(
        self,
        environments: List[Environment],
        src_name: Optional[str],
        src_id: Optional[str],
    ) -> str:
        """Pick the clone source: explicit id first, then the unique name match."""
        if src_id:
            return src_id

        if not src_name:
            raise ConfigurationError(
                "Either SRC_ENVIRONMENT_ID or SRC_ENVIRONMENT_NAME is required to create an environment"
            )

        matches = self._by_name(environments, src_name)
        if len(matches) != 1:
            raise ConfigurationError(
                f"Source environment '{src_name}' matched {len(matches)} environments, expected exactly 1"
            )
        return matches[0].id

    async def resolve(
        self,
        project_id: str,
        dest_name: str,
        src_name: Optional[str] = None,
        src_id: Optional[str] = None,
    ) -> Tuple[Environment, bool]:
        """
        Return the destination environment, cloning it when absent.

        Args:
            project_id: Railway project ID
            dest_name: Destination environment name
            src_name: Source environment name (used when src_id is not given)
            src_id: Source environment ID

        Returns:
            (environment, created)

        Raises:
            IntegrityViolation: More than one environment is named dest_name
            ConfigurationError: The clone source cannot be resolved
        """
        environments = await self.client.list_environments(project_id)

        existing = self._by_name(environments, dest_name)
        if len(existing) > 1:
            raise IntegrityViolation(
                f"Found {len(existing)} environments named '{dest_name}' "
                f"(ids: {', '.join(env.id for env in existing)}); delete the duplicates and retry"
            )
        if existing:
            environment = existing[0]
            logger.info(
                f"Environment '{dest_name}' already exists ({environment.id}), reusing it"
            )
            return environment, False

        source_id = self._resolve_source_id(environments, src_name, src_id)

        logger.info(
            f"Creating environment '{dest_name}' from source environment {source_id}"
        )
        environment = await self.client.create_environment(
            project_id=project_id, name=dest_name, source_environment_id=source_id
        )
        logger.info(
            f"Created environment '{environment.name}' ({environment.id}) with "
            f"{len(environment.service_instances)} service instance(s) and "
            f"{len(environment.deployment_triggers)} deployment trigger(s)"
        )
        return environment, True
