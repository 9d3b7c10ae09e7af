# dsl.py
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .model import Action, Job, Step


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def sh(name: str, cmd: str) -> Step:
    """Create a shell step."""
    return Step(display_name=name, command=cmd)


def with_params(**params: Any) -> Dict[str, str]:
    """
    Normalize action inputs the way GitHub expects them:
      - snake_case keys become kebab-case (aws_region -> aws-region)
      - None values are dropped
      - booleans render as "true"/"false", everything else via str()
    """
    out: Dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        out[key.replace("_", "-")] = str(value)
    return out


def action_step(name: str, identifier: str, parameters: Optional[Mapping[str, str]] = None) -> Step:
    """Create an action step with inputs passed through verbatim."""
    return Step(display_name=name, action=Action(identifier=identifier, parameters=dict(parameters or {})))


def uses(name: str, identifier: str, **with_: Any) -> Step:
    """Action step sugar: uses("Checkout", "actions/checkout@v3", fetch_depth=0)."""
    return action_step(name, identifier, with_params(**with_))


# ---------------------------------------------------------------------
# Job helper
# ---------------------------------------------------------------------

def job(
    name: str,
    *steps: Step,
    needs: Optional[List[str]] = None,
    env: Optional[Dict[str, str]] = None,
    permissions: Optional[Dict[str, str]] = None,
) -> Job:
    return Job(
        name=name,
        steps=list(steps),
        needs=list(needs or []),
        env=dict(env or {}),
        permissions=dict(permissions or {}),
    )


def wf(*jobs: Job) -> List[Job]:
    """Workflow definition helper: wf(job(...), job(...))."""
    return list(jobs)
