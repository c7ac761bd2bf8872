"""Stack loading and deep merge."""

import os

import yaml

from stackdock.stack.types import Stack
from stackdock.stack.validate import validate_stack

STACK_FILE = "stack.yaml"


def deep_merge(base, override):
    """Recursive dict merge. Override wins for scalars."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_raw_config(stack_dir, environment=None):
    """Read stack.yaml and merge the selected environment overlay into it."""
    stack_path = os.path.join(stack_dir, STACK_FILE)
    if not os.path.isfile(stack_path):
        raise FileNotFoundError(f"Stack file not found: {stack_path}")

    with open(stack_path) as f:
        config = yaml.safe_load(f) or {}

    environments = config.pop("environments", {}) or {}

    if environment is not None:
        if environment not in environments:
            available = ", ".join(sorted(environments.keys())) if environments else "none"
            raise ValueError(f"Unknown environment '{environment}'. Available environments: {available}")
        config = deep_merge(config, environments[environment] or {})

    return config


def load_stack(stack_dir, environment=None, validate=True):
    """Load stack.yaml from stack_dir, optionally deep-merging an environment.

    Returns a validated Stack dataclass.
    """
    config = _load_raw_config(stack_dir, environment)
    stack = Stack.from_dict(config)
    if validate:
        validate_stack(stack)
    return stack
