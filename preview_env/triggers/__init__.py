"""Deployment trigger rebinding."""

from preview_env.triggers.service import TriggerRebinder

__all__ = ["TriggerRebinder"]
