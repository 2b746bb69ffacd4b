"""
Redeploys service instances and selects the public domain to report.
"""

import asyncio
import logging
from typing import Iterable, List, Optional, Tuple

from preview_env.railway.client import RailwayClient
from preview_env.railway.schemas import Service, ServiceInstance
from preview_env.utils.batch import BatchReport, run_batch

logger = logging.getLogger(__name__)

# Conventional names of the service that fronts a preview environment
FALLBACK_API_SERVICE_NAMES = ("app", "backend", "web")


class RedeployCoordinator:
    """Classifies services for redeploy and domain output, then redeploys."""

    def __init__(self, client: RailwayClient):
        self.client = client

    async def _resolve_services(
        self, service_instances: List[ServiceInstance]
    ) -> List[Tuple[ServiceInstance, Service]]:
        # A failed lookup leaves classification incomplete, so it propagates
        services = await asyncio.gather(
            *(self.client.get_service(i.service_id) for i in service_instances)
        )
        return list(zip(service_instances, services))

    @staticmethod
    def select_domain(
        resolved: List[Tuple[ServiceInstance, Service]],
        api_service_name_override: Optional[str],
    ) -> Optional[str]:
        """
        Pick the first domain of the override service, else of the first
        service with a conventional API name.
        """
        if api_service_name_override:
            for instance, service in resolved:
                if service.name == api_service_name_override and instance.first_domain:
                    return instance.first_domain

        for instance, service in resolved:
            if service.name in FALLBACK_API_SERVICE_NAMES and instance.first_domain:
                return instance.first_domain
        return None

    async def coordinate(
        self,
        environment_id: str,
        service_instances: List[ServiceInstance],
        exclusion_names: Iterable[str],
        api_service_name_override: Optional[str] = None,
    ) -> Tuple[Optional[str], BatchReport]:
        """
        Redeploy every service not excluded by name and report the public domain.

        Redeploy membership and domain selection are independent: an excluded
        service can still be the domain source.

        Returns:
            (domain or None, redeploy BatchReport)
        """
        excluded = set(exclusion_names)
        resolved = await self._resolve_services(service_instances)

        to_redeploy: List[Tuple[ServiceInstance, Service]] = []
        for instance, service in resolved:
            if service.name in excluded:
                logger.info(f"Skipping redeploy of excluded service '{service.name}'")
            else:
                to_redeploy.append((instance, service))

        domain = self.select_domain(resolved, api_service_name_override)
        if domain:
            logger.info(f"Service domain: {domain}")
        else:
            logger.warning("No service domain found for the preview environment")

        async def redeploy(member: Tuple[ServiceInstance, Service]) -> None:
            instance, _ = member
            await self.client.redeploy_service_instance(
                environment_id=environment_id, service_id=instance.service_id
            )

        report = await run_batch(
            "redeploy",
            to_redeploy,
            redeploy,
            label=lambda member: member[1].name,
        )
        return domain, report
