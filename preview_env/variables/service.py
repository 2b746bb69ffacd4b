"""
Propagates environment variables to every service instance of an environment.
"""

import json
import logging
from typing import Dict, List, Optional

from preview_env.core.exceptions import ConfigurationError
from preview_env.railway.client import RailwayClient
from preview_env.railway.schemas import ServiceInstance
from preview_env.utils.batch import BatchReport, run_batch

logger = logging.getLogger(__name__)


def parse_variables(raw_variables_json: Optional[str]) -> Dict[str, str]:
    """
    Parse a JSON object of variables into a flat name -> value mapping.

    Scalars are stringified (booleans as "true"/"false"); nested values are
    rejected because Railway variables are flat strings.

    Raises:
        ConfigurationError: If the payload is not a flat JSON object
    """
    if raw_variables_json is None or not raw_variables_json.strip():
        return {}

    try:
        parsed = json.loads(raw_variables_json)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"ENV_VARS is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise ConfigurationError("ENV_VARS must be a JSON object")

    variables: Dict[str, str] = {}
    for name, value in parsed.items():
        if isinstance(value, (dict, list)):
            raise ConfigurationError(
                f"ENV_VARS value for '{name}' must be a scalar, got {type(value).__name__}"
            )
        if isinstance(value, bool):
            variables[name] = "true" if value else "false"
        elif value is None:
            variables[name] = ""
        else:
            variables[name] = str(value)
    return variables


class VariablePropagator:
    """Upserts one variable collection into every service instance."""

    def __init__(self, client: RailwayClient, project_id: str):
        self.client = client
        self.project_id = project_id

    async def propagate(
        self,
        environment_id: str,
        service_instances: List[ServiceInstance],
        raw_variables_json: Optional[str],
    ) -> BatchReport:
        # Parse once, before any mutating call
        variables = parse_variables(raw_variables_json)
        if not variables:
            logger.info("No variables to propagate")
            return BatchReport(name="variables")

        logger.info(
            f"Upserting {len(variables)} variable(s) into "
            f"{len(service_instances)} service instance(s)"
        )

        async def upsert(instance: ServiceInstance) -> None:
            await self.client.upsert_variables(
                project_id=self.project_id,
                environment_id=environment_id,
                service_id=instance.service_id,
                variables=variables,
            )

        return await run_batch(
            "variables",
            service_instances,
            upsert,
            label=lambda instance: instance.service_id,
        )
