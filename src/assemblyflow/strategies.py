# strategies.py
# How the cloud assembly crosses job boundaries.
#
# Every job of the generated workflow runs on a fresh runner, so the job that
# synthesizes the assembly has to publish it and every job that deploys it has
# to fetch it. A strategy only describes those steps; it never runs anything.

from __future__ import annotations

import re
import shlex
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .credentials import CredentialsProvider, GitHubSecretsProvider
from .dsl import action_step, sh
from .errors import config_error
from .model import Step

UPLOAD_ARTIFACT_ACTION = "actions/upload-artifact@v3"
DOWNLOAD_ARTIFACT_ACTION = "actions/download-artifact@v3"

S3_SCHEME = "s3"
SYNC_TOOL = "aws s3 sync"

# seeds become a path segment of every object key
_SEED_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class ArtifactTransferStrategy(ABC):
    """
    Moves a named directory from one job to a later one.

    upload() goes at the end of the producing job, download() at the start of
    each consuming job. Both return a fresh, non-empty list each call and
    never mutate the strategy.
    """

    @abstractmethod
    def upload(self, source_name: str, source_dir: str) -> List[Step]:
        """Steps that publish `source_dir` under `source_name`."""

    @abstractmethod
    def download(self, target_name: str, target_dir: str) -> List[Step]:
        """Steps that populate `target_dir` with what was published as `target_name`."""

    def job_permissions(self) -> Dict[str, str]:
        """Extra job permissions the returned steps need to run."""
        return {}


class NativeTransferStrategy(ArtifactTransferStrategy):
    """GitHub's own transient artifact store. No configuration, no credentials."""

    def __init__(
        self,
        upload_action: str = UPLOAD_ARTIFACT_ACTION,
        download_action: str = DOWNLOAD_ARTIFACT_ACTION,
    ):
        self.upload_action = upload_action
        self.download_action = download_action

    def upload(self, source_name: str, source_dir: str) -> List[Step]:
        return [
            action_step(
                f"Upload {source_name}",
                self.upload_action,
                {"name": source_name, "path": source_dir},
            )
        ]

    def download(self, target_name: str, target_dir: str) -> List[Step]:
        return [
            action_step(
                f"Download {target_name}",
                self.download_action,
                {"name": target_name, "path": target_dir},
            )
        ]


@dataclass(frozen=True)
class ObjectStorageConfig:
    bucket: str
    region: str
    seed: Optional[str] = None
    assume_role_arn: Optional[str] = None
    credentials_provider: Optional[CredentialsProvider] = None


class ObjectStorageTransferStrategy(ArtifactTransferStrategy):
    """
    Hands the assembly over through an S3 bucket.

    Objects live under s3://<bucket>/<seed>/<name>. The seed is fixed for the
    lifetime of the instance, so an upload and a later download of the same
    name hit the same prefix, while two pipelines sharing a bucket (each with
    its own instance) never do.

    Credential steps are emitted on every call: upload and download usually
    land in different jobs, and each job authenticates on its own.
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        seed: Optional[str] = None,
        assume_role_arn: Optional[str] = None,
        credentials_provider: Optional[CredentialsProvider] = None,
    ):
        _check_bucket(bucket)
        if not region or not region.strip():
            raise config_error("object storage transfer needs a region", bucket=bucket)
        if credentials_provider is None:
            credentials_provider = GitHubSecretsProvider()
        if isinstance(credentials_provider, type):
            raise config_error(
                "credentials provider must be an instance, not a class",
                provider=credentials_provider.__name__,
            )
        if not isinstance(credentials_provider, CredentialsProvider):
            raise config_error(
                "credentials provider must be a CredentialsProvider",
                provider=type(credentials_provider).__name__,
            )
        if seed is None:
            seed = uuid.uuid4().hex
        elif not _SEED_RE.match(seed) or ".." in seed:
            raise config_error(
                "seed must be a single path-safe token ([A-Za-z0-9._-], no '..')",
                seed=seed,
            )

        self._bucket = bucket
        self._region = region
        self._seed = seed
        self._assume_role_arn = assume_role_arn
        self._credentials_provider = credentials_provider

    @classmethod
    def from_config(cls, config: ObjectStorageConfig) -> "ObjectStorageTransferStrategy":
        return cls(
            bucket=config.bucket,
            region=config.region,
            seed=config.seed,
            assume_role_arn=config.assume_role_arn,
            credentials_provider=config.credentials_provider,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def region(self) -> str:
        return self._region

    @property
    def seed(self) -> str:
        return self._seed

    @property
    def assume_role_arn(self) -> Optional[str]:
        return self._assume_role_arn

    @property
    def credentials_provider(self) -> CredentialsProvider:
        return self._credentials_provider

    @property
    def config(self) -> ObjectStorageConfig:
        """The fully resolved configuration, seed included."""
        return ObjectStorageConfig(
            bucket=self._bucket,
            region=self._region,
            seed=self._seed,
            assume_role_arn=self._assume_role_arn,
            credentials_provider=self._credentials_provider,
        )

    def locator(self, name: str) -> str:
        return f"{S3_SCHEME}://{self._bucket}/{self._seed}/{name}"

    def _credential_steps(self) -> List[Step]:
        return list(self._credentials_provider.credential_steps(self._region, self._assume_role_arn))

    def upload(self, source_name: str, source_dir: str) -> List[Step]:
        return self._credential_steps() + [
            sh(f"Upload {source_name} to S3", _sync(source_dir, self.locator(source_name)))
        ]

    def download(self, target_name: str, target_dir: str) -> List[Step]:
        return self._credential_steps() + [
            sh(f"Download {target_name} from S3", _sync(self.locator(target_name), target_dir))
        ]

    def job_permissions(self) -> Dict[str, str]:
        return dict(self._credentials_provider.job_permissions())


def _sync(source: str, destination: str) -> str:
    # operands quoted so the command keeps exactly <tool> <source> <destination>
    return f"{SYNC_TOOL} {shlex.quote(source)} {shlex.quote(destination)}"


def _check_bucket(bucket: str) -> None:
    if not bucket or not bucket.strip():
        raise config_error("object storage transfer needs a bucket")
    if "://" in bucket:
        raise config_error("bucket must be a bare name, not a URL", bucket=bucket)
    if "/" in bucket or any(c.isspace() for c in bucket):
        raise config_error("bucket name may not contain '/' or whitespace", bucket=bucket)


# ---------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------

STRATEGY_KINDS = {
    "native": "native",
    "github": "native",
    "s3": "s3",
    "object-storage": "s3",
}


def create_strategy(kind: str = "native", **options: Any) -> ArtifactTransferStrategy:
    """
    Pick the transfer strategy for a pipeline.

        create_strategy("native")
        create_strategy("s3", bucket="ci-assembly", region="us-east-1")
    """
    resolved = STRATEGY_KINDS.get((kind or "").strip().lower())
    if resolved == "native":
        factory = NativeTransferStrategy
    elif resolved == "s3":
        factory = ObjectStorageTransferStrategy
    else:
        raise config_error(
            f"unknown transfer strategy {kind!r}",
            known=", ".join(sorted(STRATEGY_KINDS)),
        )
    try:
        return factory(**options)
    except TypeError as e:
        raise config_error(f"invalid options for {resolved} transfer", error=str(e)) from e
