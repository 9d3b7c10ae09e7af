# model.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from .errors import StepDefinitionError


class Parameters(Mapping):
    """Read-only, hashable action inputs. Insertion order is kept for the emitter."""

    __slots__ = ("_items",)

    def __init__(self, items: Any = ()):
        self._items: Dict[str, str] = dict(items)

    def __getitem__(self, key: str) -> str:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __hash__(self) -> int:
        return hash(tuple(self._items.items()))

    def __repr__(self) -> str:
        return f"Parameters({self._items!r})"


@dataclass(frozen=True)
class Action:
    """A reusable CI action invocation: `uses:` plus its `with:` inputs."""
    identifier: str
    parameters: Mapping = field(default_factory=Parameters)

    def __post_init__(self) -> None:
        # frozen: swap in a private copy so callers can't mutate shared steps
        object.__setattr__(self, "parameters", Parameters(self.parameters))


@dataclass(frozen=True)
class Step:
    """
    A single unit of work inside a CI job.

    Exactly one of `action` / `command` is populated. Steps are inert:
    nothing here runs them, the workflow emitter just serializes them.
    """
    display_name: str
    action: Optional[Action] = None
    command: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.display_name:
            raise StepDefinitionError(message="step needs a display name")
        if (self.action is None) == (self.command is None):
            raise StepDefinitionError(
                message="step must define exactly one of action or command",
                details={"step": self.display_name},
            )

    @property
    def kind(self) -> str:
        return "action" if self.action is not None else "command"

    def to_dict(self) -> Dict[str, Any]:
        """Render in the GitHub workflow step shape (name/uses/with or name/run)."""
        if self.action is not None:
            out: Dict[str, Any] = {"name": self.display_name, "uses": self.action.identifier}
            if self.action.parameters:
                out["with"] = dict(self.action.parameters)
            return out
        return {"name": self.display_name, "run": self.command}


@dataclass
class Job:
    """
    A generated workflow job: ordered steps + dependencies.

    `needs` names jobs that must finish before this one; the assembly is
    handed across exactly those edges.
    """
    name: str
    steps: List[Step] = field(default_factory=list)
    needs: List[str] = field(default_factory=list)
    env: Dict[str, str] = field(default_factory=dict)
    permissions: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.needs:
            out["needs"] = list(self.needs)
        if self.permissions:
            out["permissions"] = dict(self.permissions)
        if self.env:
            out["env"] = dict(self.env)
        out["steps"] = [s.to_dict() for s in self.steps]
        return out
