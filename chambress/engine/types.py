"""Per-request job structures. Built for one materialization and thrown away after dispatch."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from chambress.assets.base import AssetArgs

JOB_READ = "read"
JOB_CREATED = "created"
JOB_FAILED = "failed"
JOB_SKIPPED = "skipped"


@dataclass(frozen=True)
class JobConfig:
    id: int
    name: str
    queue: str
    args: Optional[AssetArgs] = None


@dataclass(frozen=True)
class JobEdge:
    job: int
    dependsOn: int


@dataclass
class JobGraph:
    jobs: List[JobConfig] = field(default_factory=list)
    dependencies: List[JobEdge] = field(default_factory=list)

    def get_job(self, job_id: int) -> JobConfig:
        for job in self.jobs:
            if job.id == job_id:
                return job
        raise KeyError(job_id)

    def dependencies_of(self, job_id: int) -> List[int]:
        return [edge.dependsOn for edge in self.dependencies if edge.job == job_id]


@dataclass
class FlowJob:
    """Execution descriptor handed to a queue runtime; children run first."""

    name: str
    queueName: str
    data: Dict[str, Any]
    children: List["FlowJob"] = field(default_factory=list)

    @property
    def job_id(self) -> int:
        return self.data["id"]


@dataclass
class JobResult:
    status: str
    message: str
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.status in (JOB_READ, JOB_CREATED)
