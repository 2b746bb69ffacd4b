"""
Rebinds deployment triggers to the preview branch.
"""

import logging
from typing import List

from preview_env.railway.client import RailwayClient
from preview_env.utils.batch import BatchReport, run_batch

logger = logging.getLogger(__name__)


class TriggerRebinder:
    """Points every deployment trigger at one branch."""

    def __init__(self, client: RailwayClient):
        self.client = client

    async def rebind(
        self, deployment_trigger_ids: List[str], branch_name: str
    ) -> BatchReport:
        """
        Update the branch of every trigger concurrently.

        Only call once the initial deployment is terminal: rebinding while a
        build is in flight desynchronizes that build from its trigger.
        """
        logger.info(
            f"Rebinding {len(deployment_trigger_ids)} deployment trigger(s) to branch '{branch_name}'"
        )

        async def update(trigger_id: str) -> None:
            await self.client.update_deployment_trigger(trigger_id, branch_name)

        return await run_batch("triggers", deployment_trigger_ids, update)
