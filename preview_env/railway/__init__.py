"""
Railway API boundary: GraphQL client, operation documents and typed records.
"""

from preview_env.railway.client import RailwayClient
from preview_env.railway.schemas import (
    Deployment,
    DeploymentStatus,
    DeploymentTrigger,
    Domain,
    Environment,
    ProjectToken,
    Service,
    ServiceInstance,
)

__all__ = [
    "RailwayClient",
    "Deployment",
    "DeploymentStatus",
    "DeploymentTrigger",
    "Domain",
    "Environment",
    "ProjectToken",
    "Service",
    "ServiceInstance",
]
