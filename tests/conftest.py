"""
Pytest configuration and shared fixtures for preview environment tests.
"""

import os

# Set required environment variables BEFORE importing package modules
os.environ.setdefault("RAILWAY_API_TOKEN", "test-railway-token")
os.environ.setdefault("PROJECT_ID", "proj-1")
os.environ.setdefault("DEST_ENV_NAME", "pr-42")
os.environ.setdefault("BRANCH_NAME", "feature/preview")
os.environ.setdefault("LOG_LEVEL", "INFO")

import itertools
from typing import Dict, List, Optional

import pytest

from preview_env.core.config import Settings
from preview_env.core.exceptions import RemoteAPIError
from preview_env.railway.schemas import (
    Deployment,
    Environment,
    ProjectToken,
    Service,
)


def build_environment(
    env_id: str,
    name: str,
    services: Optional[List[Dict]] = None,
    triggers: Optional[List[str]] = None,
    statuses: Optional[List[str]] = None,
) -> Environment:
    """
    Build an Environment from the raw relay shape Railway returns.

    services: [{"service_id": ..., "domains": [...]}]
    """
    services = services or []
    return Environment.model_validate(
        {
            "id": env_id,
            "name": name,
            "deployments": {
                "edges": [
                    {"node": {"id": f"dep-{env_id}-{i}", "status": status}}
                    for i, status in enumerate(statuses or [])
                ]
            },
            "deploymentTriggers": {
                "edges": [
                    {
                        "node": {
                            "id": trigger_id,
                            "environmentId": env_id,
                            "branch": "main",
                            "projectId": "proj-1",
                        }
                    }
                    for trigger_id in (triggers or [])
                ]
            },
            "serviceInstances": {
                "edges": [
                    {
                        "node": {
                            "id": f"si-{svc['service_id']}",
                            "serviceId": svc["service_id"],
                            "startCommand": None,
                            "domains": {
                                "serviceDomains": [
                                    {"domain": d} for d in svc.get("domains", [])
                                ]
                            },
                        }
                    }
                    for svc in services
                ]
            },
        }
    )


class FakeRailwayClient:
    """In-memory stand-in for RailwayClient that records every call in order."""

    def __init__(self):
        self.environments: List[Environment] = []
        self.services: Dict[str, Service] = {}
        self.tokens: Dict[str, ProjectToken] = {}
        self.calls: List[tuple] = []
        self.created_environment: Optional[Environment] = None
        self.fail_upsert_for = set()
        self.fail_trigger_for = set()
        self.fail_redeploy_for = set()
        # Statuses returned for the latest deployment on successive reads
        self.status_sequence: List[str] = []
        self._token_ids = itertools.count(1)

    def add_service(self, service_id: str, name: str) -> None:
        self.services[service_id] = Service(id=service_id, name=name)

    def add_token(self, token_id: str, name: str, environment_id: str) -> None:
        self.tokens[token_id] = ProjectToken(
            id=token_id, name=name, environmentId=environment_id
        )

    def _current_environments(self) -> List[Environment]:
        if not self.status_sequence:
            return list(self.environments)
        status = (
            self.status_sequence.pop(0)
            if len(self.status_sequence) > 1
            else self.status_sequence[0]
        )
        return [
            env.model_copy(
                update={"deployments": [Deployment(id=f"dep-{env.id}", status=status)]}
            )
            for env in self.environments
        ]

    async def list_environments(self, project_id: str) -> List[Environment]:
        self.calls.append(("list_environments", project_id))
        return self._current_environments()

    async def get_service(self, service_id: str) -> Service:
        self.calls.append(("get_service", service_id))
        if service_id not in self.services:
            raise RemoteAPIError(f"Service {service_id} not found", operation="service")
        return self.services[service_id]

    async def list_project_tokens(self, project_id: str) -> List[ProjectToken]:
        self.calls.append(("list_project_tokens", project_id))
        return list(self.tokens.values())

    async def create_environment(
        self, project_id: str, name: str, source_environment_id: str
    ) -> Environment:
        self.calls.append(("create_environment", name, source_environment_id))
        environment = self.created_environment or build_environment("env-new", name)
        self.environments.append(environment)
        return environment

    async def upsert_variables(
        self, project_id: str, environment_id: str, service_id: str, variables: Dict
    ) -> None:
        self.calls.append(("upsert_variables", service_id, dict(variables)))
        if service_id in self.fail_upsert_for:
            raise RemoteAPIError("upsert failed", operation="variableCollectionUpsert")

    async def update_deployment_trigger(self, trigger_id: str, branch: str) -> None:
        self.calls.append(("update_deployment_trigger", trigger_id, branch))
        if trigger_id in self.fail_trigger_for:
            raise RemoteAPIError("trigger update failed", operation="deploymentTriggerUpdate")

    async def redeploy_service_instance(
        self, environment_id: str, service_id: str
    ) -> None:
        self.calls.append(("redeploy_service_instance", environment_id, service_id))
        if service_id in self.fail_redeploy_for:
            raise RemoteAPIError("redeploy failed", operation="serviceInstanceRedeploy")

    async def create_project_token(
        self, project_id: str, environment_id: str, name: str
    ) -> str:
        token_id = f"tok-{next(self._token_ids)}"
        self.calls.append(("create_project_token", environment_id, name))
        self.tokens[token_id] = ProjectToken(
            id=token_id, name=name, environmentId=environment_id
        )
        return f"secret-{token_id}"

    async def delete_project_token(self, token_id: str) -> None:
        self.calls.append(("delete_project_token", token_id))
        self.tokens.pop(token_id, None)

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return None


class FakeClock:
    """Monotonic clock advanced only by the fake sleep."""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_client():
    return FakeRailwayClient()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_environment():
    return build_environment


@pytest.fixture
def settings_factory():
    """Build Settings without reading a .env file."""

    def _make(**overrides) -> Settings:
        values = {
            "RAILWAY_API_TOKEN": "test-railway-token",
            "PROJECT_ID": "proj-1",
            "SRC_ENVIRONMENT_NAME": "staging",
            "DEST_ENV_NAME": "pr-42",
            "BRANCH_NAME": "feature/preview",
            "POLL_INTERVAL_SECONDS": 20.0,
            "INITIAL_SETTLE_SECONDS": 15.0,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make
