# settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import config_error
from .pipeline import DEFAULT_ARTIFACT_NAME, DEFAULT_ASSEMBLY_DIR
from .strategies import STRATEGY_KINDS, ArtifactTransferStrategy, create_strategy

ENV_PREFIX = "ASSEMBLYFLOW_"
DEFAULT_REGION = "us-east-1"


@dataclass(frozen=True)
class Settings:
    strategy: str = "native"
    bucket: Optional[str] = None
    region: str = DEFAULT_REGION
    seed: Optional[str] = None
    assume_role_arn: Optional[str] = None
    artifact_name: str = DEFAULT_ARTIFACT_NAME
    assembly_dir: str = DEFAULT_ASSEMBLY_DIR

    def build_strategy(self) -> ArtifactTransferStrategy:
        if STRATEGY_KINDS.get(self.strategy) == "s3":
            return create_strategy(
                self.strategy,
                bucket=self.bucket or "",
                region=self.region,
                seed=self.seed,
                assume_role_arn=self.assume_role_arn,
            )
        return create_strategy(self.strategy)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    def get(name: str, default: Optional[str] = None) -> Optional[str]:
        value = env.get(ENV_PREFIX + name)
        if value is None or not value.strip():
            return default
        return value.strip()

    strategy = get("STRATEGY", "native").lower()
    if strategy not in STRATEGY_KINDS:
        raise config_error(
            f"unknown transfer strategy {strategy!r}",
            variable=ENV_PREFIX + "STRATEGY",
            known=", ".join(sorted(STRATEGY_KINDS)),
        )

    return Settings(
        strategy=strategy,
        bucket=get("BUCKET"),
        region=get("REGION", DEFAULT_REGION),
        seed=get("SEED"),
        assume_role_arn=get("ASSUME_ROLE_ARN"),
        artifact_name=get("ARTIFACT_NAME", DEFAULT_ARTIFACT_NAME),
        assembly_dir=get("ASSEMBLY_DIR", DEFAULT_ASSEMBLY_DIR),
    )
