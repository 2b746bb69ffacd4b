"""
Project token rotation for a preview environment.

Railway has no update-in-place for project tokens, so rotation is
delete-then-create under a deterministic name derived from the environment.
"""

import logging
from typing import Callable

from preview_env.core.config import DEFAULT_TOKEN_NAME_TEMPLATE
from preview_env.core.exceptions import IntegrityViolation
from preview_env.railway.client import RailwayClient
from preview_env.railway.schemas import Environment

logger = logging.getLogger(__name__)


def default_token_name(environment_name: str) -> str:
    return DEFAULT_TOKEN_NAME_TEMPLATE.format(environment=environment_name)


class TokenRotator:
    """Keeps exactly one named project token bound to an environment."""

    def __init__(
        self,
        client: RailwayClient,
        project_id: str,
        token_name: Callable[[str], str] = default_token_name,
    ):
        self.client = client
        self.project_id = project_id
        self.token_name = token_name

    async def rotate(self, environment: Environment) -> str:
        """
        Replace the environment's project token and return the new secret.

        Raises:
            IntegrityViolation: A token with the same name is bound to another environment
        """
        name = self.token_name(environment.name)
        tokens = await self.client.list_project_tokens(self.project_id)

        same_name = [t for t in tokens if t.name == name]
        foreign = [t for t in same_name if t.environment_id != environment.id]
        if foreign:
            bound_to = ", ".join(str(t.environment_id) for t in foreign)
            raise IntegrityViolation(
                f"Project token '{name}' is bound to environment(s) {bound_to}, "
                f"not {environment.id}; refusing to reuse or delete it"
            )

        # Normally at most one; several are left behind by an interrupted run
        for stale in same_name:
            logger.info(f"Deleting project token '{name}' ({stale.id})")
            await self.client.delete_project_token(stale.id)

        token = await self.client.create_project_token(
            project_id=self.project_id, environment_id=environment.id, name=name
        )
        logger.info(f"Created project token '{name}' for environment {environment.id}")
        return token
