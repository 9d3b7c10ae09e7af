# credentials.py
# Credential providers turn (region, role) into the steps that authenticate a
# job against AWS. The transfer strategies treat them as opaque: they only call
# credential_steps() and splice the result in front of their own command.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from .dsl import uses
from .errors import config_error
from .model import Step

CONFIGURE_AWS_CREDENTIALS = "aws-actions/configure-aws-credentials@v2"

# role-external-id used whenever a deploy role is assumed
PIPELINE_EXTERNAL_ID = "Pipeline"


def aws_credential_step(display_name: str, region: str, **params: Optional[str | bool]) -> Step:
    """
    One configure-aws-credentials step.

    Keyword inputs use snake_case and are emitted kebab-case:
        aws_credential_step("Auth", "us-east-1", role_to_assume="arn:...")
        -> with: {aws-region: us-east-1, role-to-assume: arn:...}
    """
    return uses(display_name, CONFIGURE_AWS_CREDENTIALS, aws_region=region, **params)


class CredentialsProvider(ABC):
    """Produces the ordered steps that authenticate a job to AWS."""

    @abstractmethod
    def credential_steps(self, region: str, assume_role_arn: Optional[str] = None) -> List[Step]:
        """Must be deterministic for the same inputs and free of side effects."""

    def job_permissions(self) -> Dict[str, str]:
        return {}


class GitHubSecretsProvider(CredentialsProvider):
    """
    Authenticate with long-lived keys stored as repository secrets.

    This is the platform's own secret injection and the default source for
    object-storage transfers. Arguments are secret NAMES, not values.
    """

    def __init__(
        self,
        access_key_id: str = "AWS_ACCESS_KEY_ID",
        secret_access_key: str = "AWS_SECRET_ACCESS_KEY",
        session_token: Optional[str] = None,
    ):
        if not access_key_id or not secret_access_key:
            raise config_error(
                "GitHub secrets provider needs both key secret names",
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
            )
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key
        self.session_token = session_token

    def credential_steps(self, region: str, assume_role_arn: Optional[str] = None) -> List[Step]:
        params = {
            "aws_access_key_id": _secret(self.access_key_id),
            "aws_secret_access_key": _secret(self.secret_access_key),
            "aws_session_token": _secret(self.session_token) if self.session_token else None,
        }
        if assume_role_arn:
            params.update(
                role_to_assume=assume_role_arn,
                role_external_id=PIPELINE_EXTERNAL_ID,
                role_skip_session_tagging=True,
            )
        return [aws_credential_step("Authenticate Via GitHub Secrets", region, **params)]


class OpenIdConnectProvider(CredentialsProvider):
    """
    Authenticate through GitHub's OIDC token exchange.

    The job assumes `git_hub_action_role_arn` first; if a deploy role is
    requested it is chained from the credentials the first step exported.
    """

    def __init__(self, git_hub_action_role_arn: str, role_session_name: Optional[str] = None):
        if not git_hub_action_role_arn:
            raise config_error("OpenID Connect provider needs the GitHub Actions role ARN")
        self.git_hub_action_role_arn = git_hub_action_role_arn
        self.role_session_name = role_session_name

    def credential_steps(self, region: str, assume_role_arn: Optional[str] = None) -> List[Step]:
        steps = [
            aws_credential_step(
                "Authenticate Via OIDC Role",
                region,
                role_to_assume=self.git_hub_action_role_arn,
                role_session_name=self.role_session_name,
            )
        ]
        if assume_role_arn:
            steps.append(
                aws_credential_step(
                    "Assume CDK Deploy Role",
                    region,
                    aws_access_key_id="${{ env.AWS_ACCESS_KEY_ID }}",
                    aws_secret_access_key="${{ env.AWS_SECRET_ACCESS_KEY }}",
                    aws_session_token="${{ env.AWS_SESSION_TOKEN }}",
                    role_to_assume=assume_role_arn,
                    role_external_id=PIPELINE_EXTERNAL_ID,
                    role_skip_session_tagging=True,
                )
            )
        return steps

    def job_permissions(self) -> Dict[str, str]:
        # the OIDC token request needs id-token: write
        return {"id-token": "write", "contents": "read"}


class StaticStepsProvider(CredentialsProvider):
    """Returns a fixed step list for every call (runner-provided credentials, tests)."""

    def __init__(self, steps: Sequence[Step] = ()):
        self.steps = list(steps)

    def credential_steps(self, region: str, assume_role_arn: Optional[str] = None) -> List[Step]:
        return list(self.steps)


def _secret(name: str) -> str:
    return "${{ secrets.%s }}" % name


def from_github_secrets(
    access_key_id: str = "AWS_ACCESS_KEY_ID",
    secret_access_key: str = "AWS_SECRET_ACCESS_KEY",
    session_token: Optional[str] = None,
) -> GitHubSecretsProvider:
    return GitHubSecretsProvider(access_key_id, secret_access_key, session_token)


def from_open_id_connect(git_hub_action_role_arn: str, role_session_name: Optional[str] = None) -> OpenIdConnectProvider:
    return OpenIdConnectProvider(git_hub_action_role_arn, role_session_name)
