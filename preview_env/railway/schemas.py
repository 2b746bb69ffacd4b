"""
Pydantic schemas for Railway API records.

Railway returns relay-style connections ({"edges": [{"node": ...}]}); they are
flattened into plain lists here so the workflow only sees typed records.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def unwrap_edges(value: Any) -> Any:
    """Flatten a relay connection into a list of nodes."""
    if value is None:
        return []
    if isinstance(value, dict) and "edges" in value:
        edges = value["edges"] or []
        return [edge.get("node") if isinstance(edge, dict) else edge for edge in edges]
    return value


class DeploymentStatus(str, Enum):
    """Deployment statuses the monitor knows how to classify."""

    QUEUED = "QUEUED"
    INITIALIZING = "INITIALIZING"
    WAITING = "WAITING"
    BUILDING = "BUILDING"
    DEPLOYING = "DEPLOYING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


IN_PROGRESS_STATUSES = frozenset(
    status.value
    for status in (
        DeploymentStatus.QUEUED,
        DeploymentStatus.WAITING,
        DeploymentStatus.INITIALIZING,
        DeploymentStatus.BUILDING,
        DeploymentStatus.DEPLOYING,
    )
)


class RailwayRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class Domain(RailwayRecord):
    domain: str


class Service(RailwayRecord):
    id: str
    name: str


class Deployment(RailwayRecord):
    id: str
    # Kept as a raw string: unknown statuses must reach the monitor intact
    status: str


class DeploymentTrigger(RailwayRecord):
    id: str
    environment_id: Optional[str] = Field(None, alias="environmentId")
    branch: Optional[str] = None
    project_id: Optional[str] = Field(None, alias="projectId")


class ServiceInstance(RailwayRecord):
    id: str
    service_id: str = Field(..., alias="serviceId")
    start_command: Optional[str] = Field(None, alias="startCommand")
    domains: List[Domain] = Field(default_factory=list)

    @field_validator("domains", mode="before")
    @classmethod
    def _flatten_domains(cls, value):
        if value is None:
            return []
        if isinstance(value, dict):
            return value.get("serviceDomains") or []
        return value

    @property
    def first_domain(self) -> Optional[str]:
        """Index 0 is the canonical public domain."""
        return self.domains[0].domain if self.domains else None


class Environment(RailwayRecord):
    id: str
    name: str
    service_instances: List[ServiceInstance] = Field(
        default_factory=list, alias="serviceInstances"
    )
    deployment_triggers: List[DeploymentTrigger] = Field(
        default_factory=list, alias="deploymentTriggers"
    )
    deployments: List[Deployment] = Field(default_factory=list)

    @field_validator(
        "service_instances", "deployment_triggers", "deployments", mode="before"
    )
    @classmethod
    def _flatten_connections(cls, value):
        return unwrap_edges(value)

    @property
    def latest_deployment(self) -> Optional[Deployment]:
        """Railway lists deployments newest first."""
        return self.deployments[0] if self.deployments else None


class ProjectToken(RailwayRecord):
    id: str
    name: str
    environment_id: Optional[str] = Field(None, alias="environmentId")
    display_token: Optional[str] = Field(None, alias="displayToken")
