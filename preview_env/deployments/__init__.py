"""
Deployments module: watches the status of the latest deployment of an
environment until it is terminal.
"""

from preview_env.deployments.service import DeploymentMonitor, MonitorState

__all__ = ["DeploymentMonitor", "MonitorState"]
