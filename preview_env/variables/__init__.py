"""Variables module: upserts configuration into every service instance."""

from preview_env.variables.service import VariablePropagator, parse_variables

__all__ = ["VariablePropagator", "parse_variables"]
