"""Stack topology: types, loading, dependency graph, validation."""

from stackdock.stack.graph import dependents, find_cycle, startup_order
from stackdock.stack.stack import STACK_FILE, deep_merge, load_stack
from stackdock.stack.types import (
    BuildConfig,
    DeployConfig,
    PipelineConfig,
    RegistryConfig,
    RouteConfig,
    ServiceConfig,
    Stack,
)
from stackdock.stack.validate import stack_errors, validate_stack

__all__ = [
    "BuildConfig",
    "DeployConfig",
    "PipelineConfig",
    "RegistryConfig",
    "RouteConfig",
    "STACK_FILE",
    "ServiceConfig",
    "Stack",
    "deep_merge",
    "dependents",
    "find_cycle",
    "load_stack",
    "stack_errors",
    "startup_order",
    "validate_stack",
]
