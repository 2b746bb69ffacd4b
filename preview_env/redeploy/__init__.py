"""Redeploy coordination and public domain selection."""

from preview_env.redeploy.service import RedeployCoordinator

__all__ = ["RedeployCoordinator"]
