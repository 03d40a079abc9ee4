"""Error taxonomy for the materialization engine.

Graph-level errors (cycles, unknown asset names) abort a materialization
before anything is dispatched and propagate to the caller. Everything raised
while a single job runs is caught at the job boundary by the executor and
reported as a failed JobResult.
"""


class ChambressError(Exception):
    """Base class for all engine errors."""


class CycleDetectedError(ChambressError):
    """The asset dependency graph contains a cycle."""

    def __init__(self, job_id: int):
        self.job_id = job_id
        super().__init__(f"Cycle detected in job graph at job {job_id}")


class UnknownAssetError(ChambressError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown asset: {name}")


class MissingCredentialError(ChambressError):
    """No Congress.gov API keys are configured."""

    def __init__(self, message: str = "No API keys available"):
        super().__init__(message)


class AssetValidationError(ChambressError):
    """A fetched payload or cached file does not have the expected shape."""

    def __init__(self, asset: str, detail: str):
        self.asset = asset
        self.detail = detail
        super().__init__(f"{asset}: {detail}")


class MissingMetadataError(ChambressError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"expected meta file to exist: {path}")
