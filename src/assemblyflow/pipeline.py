# pipeline.py
# Thin consumer of the transfer contract: splices upload/download steps into
# the jobs on either side of an assembly hand-off and renders the result in
# the shape the workflow emitter consumes.

from __future__ import annotations

from typing import Any, Dict, List, Optional

from .dag import build_dag, downstream, ordered, topo_levels
from .errors import config_error
from .model import Job
from .strategies import ArtifactTransferStrategy, NativeTransferStrategy

DEFAULT_ARTIFACT_NAME = "cloud-assembly"
DEFAULT_ASSEMBLY_DIR = "cdk.out"

DEFAULT_TRIGGERS: Dict[str, Any] = {
    "push": {"branches": ["main"]},
    "workflow_dispatch": {},
}


class AssemblyPipeline:
    """
    Holds the one strategy a pipeline uses and applies it at every boundary.

        pipe = AssemblyPipeline(create_strategy("s3", bucket="b", region="us-east-1"))
        pipe.wire([build_job, deploy_job])
    """

    def __init__(
        self,
        strategy: Optional[ArtifactTransferStrategy] = None,
        artifact_name: str = DEFAULT_ARTIFACT_NAME,
        assembly_dir: str = DEFAULT_ASSEMBLY_DIR,
    ):
        if not artifact_name:
            raise config_error("artifact name may not be empty")
        if not assembly_dir:
            raise config_error("assembly directory may not be empty")
        self.strategy = strategy if strategy is not None else NativeTransferStrategy()
        self.artifact_name = artifact_name
        self.assembly_dir = assembly_dir

    def add_producer(self, job: Job) -> Job:
        """Publish the assembly once the job's own steps are done."""
        job.steps.extend(self.strategy.upload(self.artifact_name, self.assembly_dir))
        self._merge_permissions(job)
        return job

    def add_consumer(self, job: Job) -> Job:
        """Fetch the assembly before the job's own steps run."""
        job.steps[:0] = self.strategy.download(self.artifact_name, self.assembly_dir)
        self._merge_permissions(job)
        return job

    def _merge_permissions(self, job: Job) -> None:
        for scope, level in self.strategy.job_permissions().items():
            job.permissions.setdefault(scope, level)

    def wire(self, jobs: List[Job], producer: Optional[str] = None) -> List[Job]:
        """
        Splice the hand-off into a job list.

        Without an explicit producer, the first root job (no needs) that
        something depends on produces the assembly. Every job downstream of
        the producer consumes it, directly or through other jobs: each one
        starts on a fresh runner.
        """
        adj, indeg = build_dag(jobs)
        topo_levels(adj, indeg)  # reject cycles before touching any job
        job_map = {j.name: j for j in jobs}

        if producer is None:
            roots = [j.name for j in jobs if indeg[j.name] == 0 and adj[j.name]]
            if not roots:
                raise config_error("no job hands anything to another job", jobs=sorted(job_map))
            producer = roots[0]
        elif producer not in job_map:
            raise config_error(f"unknown producer job '{producer}'", known=sorted(job_map))

        self.add_producer(job_map[producer])
        consumers = downstream(adj, producer)
        for j in jobs:
            if j.name in consumers:
                self.add_consumer(j)
        return jobs


def workflow_to_dict(
    jobs: List[Job],
    name: str = "deploy",
    on: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Emitter-facing dict: jobs in dependency order, step order untouched."""
    return {
        "name": name,
        "on": dict(on if on is not None else DEFAULT_TRIGGERS),
        "jobs": {j.name: j.to_dict() for j in ordered(jobs)},
    }
