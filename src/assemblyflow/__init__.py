from .credentials import (
    CredentialsProvider,
    GitHubSecretsProvider,
    OpenIdConnectProvider,
    StaticStepsProvider,
    from_github_secrets,
    from_open_id_connect,
)
from .dsl import action_step, job, sh, uses, wf
from .errors import AssemblyFlowError, ConfigurationError, StepDefinitionError
from .model import Action, Job, Step
from .pipeline import AssemblyPipeline, workflow_to_dict
from .settings import Settings, load_settings
from .strategies import (
    ArtifactTransferStrategy,
    NativeTransferStrategy,
    ObjectStorageConfig,
    ObjectStorageTransferStrategy,
    create_strategy,
)

__all__ = [
    "Action",
    "ArtifactTransferStrategy",
    "AssemblyFlowError",
    "AssemblyPipeline",
    "ConfigurationError",
    "CredentialsProvider",
    "GitHubSecretsProvider",
    "Job",
    "NativeTransferStrategy",
    "ObjectStorageConfig",
    "ObjectStorageTransferStrategy",
    "OpenIdConnectProvider",
    "Settings",
    "StaticStepsProvider",
    "Step",
    "StepDefinitionError",
    "action_step",
    "create_strategy",
    "from_github_secrets",
    "from_open_id_connect",
    "job",
    "load_settings",
    "sh",
    "uses",
    "wf",
    "workflow_to_dict",
]
