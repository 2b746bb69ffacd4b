"""
Railway API client.

Issues authenticated GraphQL operations against a single endpoint and validates
responses into typed records. No retries are performed here: retry policy
belongs to the caller of each operation.
"""

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from preview_env.core.config import Settings
from preview_env.core.exceptions import (
    RemoteAPIError,
    TransportError,
    UnexpectedResponse,
)
from preview_env.railway.queries import OPERATIONS
from preview_env.railway.schemas import (
    Environment,
    ProjectToken,
    Service,
    unwrap_edges,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class RailwayClient:
    """Async client for the Railway GraphQL API."""

    def __init__(
        self,
        api_token: str,
        endpoint: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = endpoint
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RailwayClient":
        return cls(
            api_token=settings.RAILWAY_API_TOKEN,
            endpoint=settings.RAILWAY_API_ENDPOINT,
            timeout=settings.HTTP_REQUEST_TIMEOUT_SECONDS,
        )

    async def __aenter__(self) -> "RailwayClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def call(
        self, operation: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Execute a named GraphQL operation.

        Args:
            operation: Operation name, a key of queries.OPERATIONS
            variables: GraphQL variables

        Returns:
            The "data" object of the response envelope

        Raises:
            TransportError: Network, timeout, authentication or HTTP status failure
            RemoteAPIError: The response envelope carries GraphQL errors
            UnexpectedResponse: The body is not a GraphQL envelope
        """
        document = OPERATIONS.get(operation)
        if document is None:
            raise ValueError(f"Unknown Railway operation: {operation}")

        logger.debug(f"Railway API call: {operation}")

        try:
            response = await self._http.post(
                self.endpoint,
                json={"query": document, "variables": variables or {}},
                headers=self._headers,
            )
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Railway API request timed out during {operation}",
                detail=str(e),
                operation=operation,
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                f"Railway API request failed during {operation}: {e}",
                detail=str(e),
                operation=operation,
            ) from e

        if response.status_code in (401, 403):
            raise TransportError(
                f"Railway API rejected the token ({response.status_code}) during {operation}",
                detail=response.text,
                operation=operation,
            )

        if not 200 <= response.status_code < 300:
            raise TransportError(
                f"Railway API request failed with status {response.status_code} during {operation}",
                detail=response.text,
                operation=operation,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UnexpectedResponse(
                f"Railway API returned a non-JSON body for {operation}"
            ) from e

        if not isinstance(payload, dict):
            raise UnexpectedResponse(
                f"Railway API returned a non-object body for {operation}"
            )

        errors = payload.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) else errors
            message = first.get("message", "Unknown error") if isinstance(first, dict) else str(first)
            raise RemoteAPIError(
                f"Railway {operation} failed: {message}",
                detail=errors,
                operation=operation,
            )

        data = payload.get("data")
        if not isinstance(data, dict):
            raise UnexpectedResponse(
                f"Railway API response for {operation} has no data object"
            )
        return data

    # ==================== Typed Operations ====================

    @staticmethod
    def _parse(model: Type[ModelT], raw: Any, what: str) -> ModelT:
        try:
            return model.model_validate(raw)
        except ValidationError as e:
            raise UnexpectedResponse(f"Malformed {what} in Railway response: {e}") from e

    async def list_environments(self, project_id: str) -> List[Environment]:
        """All environments of a project with instances, triggers and deployments."""
        data = await self.call("environments", {"projectId": project_id})
        if not isinstance(data.get("environments"), dict):
            raise UnexpectedResponse("Railway response has no environments connection")
        nodes = unwrap_edges(data["environments"])
        return [self._parse(Environment, node, "environment") for node in nodes]

    async def get_service(self, service_id: str) -> Service:
        data = await self.call("service", {"id": service_id})
        return self._parse(Service, data.get("service"), "service")

    async def list_project_tokens(self, project_id: str) -> List[ProjectToken]:
        data = await self.call("projectTokens", {"projectId": project_id})
        if not isinstance(data.get("projectTokens"), dict):
            raise UnexpectedResponse("Railway response has no projectTokens connection")
        nodes = unwrap_edges(data["projectTokens"])
        return [self._parse(ProjectToken, node, "project token") for node in nodes]

    async def create_environment(
        self, project_id: str, name: str, source_environment_id: str
    ) -> Environment:
        data = await self.call(
            "environmentCreate",
            {
                "input": {
                    "name": name,
                    "projectId": project_id,
                    "sourceEnvironmentId": source_environment_id,
                }
            },
        )
        return self._parse(Environment, data.get("environmentCreate"), "environment")

    async def upsert_variables(
        self,
        project_id: str,
        environment_id: str,
        service_id: str,
        variables: Dict[str, str],
    ) -> None:
        await self.call(
            "variableCollectionUpsert",
            {
                "input": {
                    "projectId": project_id,
                    "environmentId": environment_id,
                    "serviceId": service_id,
                    "variables": variables,
                }
            },
        )

    async def update_deployment_trigger(self, trigger_id: str, branch: str) -> None:
        await self.call(
            "deploymentTriggerUpdate",
            {"id": trigger_id, "input": {"branch": branch}},
        )

    async def redeploy_service_instance(
        self, environment_id: str, service_id: str
    ) -> None:
        await self.call(
            "serviceInstanceRedeploy",
            {"environmentId": environment_id, "serviceId": service_id},
        )

    async def create_project_token(
        self, project_id: str, environment_id: str, name: str
    ) -> str:
        """Create a token; the returned value is the only time it is visible."""
        data = await self.call(
            "projectTokenCreate",
            {
                "input": {
                    "projectId": project_id,
                    "environmentId": environment_id,
                    "name": name,
                }
            },
        )
        token = data.get("projectTokenCreate")
        if not isinstance(token, str) or not token:
            raise UnexpectedResponse("Railway projectTokenCreate returned no token")
        return token

    async def delete_project_token(self, token_id: str) -> None:
        await self.call("projectTokenDelete", {"id": token_id})
