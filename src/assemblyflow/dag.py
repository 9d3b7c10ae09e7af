# dag.py
# Job graph checks for the generated workflow. The emitter needs jobs in an
# order GitHub accepts, and the assembly hand-off needs to know which jobs sit
# behind the one that synthesizes it.

from __future__ import annotations

from collections import deque
from typing import Dict, List, Set, Tuple

from .errors import config_error
from .model import Job


def build_dag(jobs: List[Job]) -> Tuple[Dict[str, Set[str]], Dict[str, int]]:
    """Return (dependents per job, unmet needs per job); names must be unique and resolvable."""
    names = [j.name for j in jobs]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise config_error("duplicate job names", jobs=dupes)

    dependents: Dict[str, Set[str]] = {n: set() for n in names}
    pending: Dict[str, int] = {n: 0 for n in names}

    for j in jobs:
        for upstream in set(j.needs):
            if upstream not in dependents:
                raise config_error(
                    f"job '{j.name}' needs missing job '{upstream}'",
                    known=sorted(dependents),
                )
            dependents[upstream].add(j.name)
            pending[j.name] += 1

    return dependents, pending


def topo_levels(adj: Dict[str, Set[str]], indeg: Dict[str, int]) -> List[List[str]]:
    """Group jobs into waves; a job lands in the wave after its last need."""
    pending = dict(indeg)
    ready = deque(sorted(n for n, count in pending.items() if count == 0))
    levels: List[List[str]] = []
    placed = 0

    while ready:
        wave = [ready.popleft() for _ in range(len(ready))]
        placed += len(wave)
        for name in wave:
            for dependent in sorted(adj[name]):
                pending[dependent] -= 1
                if pending[dependent] == 0:
                    ready.append(dependent)
        levels.append(wave)

    if placed != len(pending):
        raise config_error("job graph has a cycle", stuck=sorted(n for n, c in pending.items() if c > 0))

    return levels


def downstream(adj: Dict[str, Set[str]], start: str) -> Set[str]:
    """Every job that runs after `start`, directly or transitively (excluding `start`)."""
    seen: Set[str] = set()
    todo = deque(adj[start])
    while todo:
        name = todo.popleft()
        if name not in seen:
            seen.add(name)
            todo.extend(adj[name])
    return seen


def ordered(jobs: List[Job]) -> List[Job]:
    """Jobs in dependency order, alphabetical within a wave."""
    by_name = {j.name: j for j in jobs}
    adj, indeg = build_dag(jobs)
    return [by_name[name] for wave in topo_levels(adj, indeg) for name in wave]
