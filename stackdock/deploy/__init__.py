"""Deploy library: apply planning, orchestration, post-deploy checks."""

from stackdock.deploy.check import check_routes
from stackdock.deploy.orchestrate import (
    deploy,
    inspect_states,
    run_deploy,
    run_teardown,
    teardown,
)
from stackdock.deploy.params import DeployParams
from stackdock.deploy.plan import RecreatePlan, ServiceState, plan_recreate

__all__ = [
    "DeployParams",
    "RecreatePlan",
    "ServiceState",
    "check_routes",
    "deploy",
    "inspect_states",
    "plan_recreate",
    "run_deploy",
    "run_teardown",
    "teardown",
]
