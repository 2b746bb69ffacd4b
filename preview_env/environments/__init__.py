"""
Environments module: finds or clones the destination environment.
"""

from preview_env.environments.service import EnvironmentResolver

__all__ = ["EnvironmentResolver"]
