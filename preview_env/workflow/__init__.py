"""End to end preview environment workflow."""

from preview_env.workflow.service import PreviewWorkflow, WorkflowResult

__all__ = ["PreviewWorkflow", "WorkflowResult"]
