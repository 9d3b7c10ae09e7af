"""
Tests for assemblyflow.credentials
===================================

Providers are opaque to the strategies, but their output ends up verbatim
in every object-storage transfer, so the step contents are pinned here.
"""

import pytest

from assemblyflow.credentials import (
    CONFIGURE_AWS_CREDENTIALS,
    GitHubSecretsProvider,
    OpenIdConnectProvider,
    StaticStepsProvider,
    aws_credential_step,
    from_github_secrets,
    from_open_id_connect,
)
from assemblyflow.dsl import sh
from assemblyflow.errors import ConfigurationError


class TestAwsCredentialStep:
    def test_uses_configure_action(self) -> None:
        step = aws_credential_step("Auth", "us-east-1")
        assert step.action.identifier == CONFIGURE_AWS_CREDENTIALS
        assert step.action.parameters == {"aws-region": "us-east-1"}

    def test_none_inputs_dropped(self) -> None:
        step = aws_credential_step("Auth", "us-east-1", role_session_name=None)
        assert "role-session-name" not in step.action.parameters


class TestGitHubSecretsProvider:
    """The default provider: repository secrets injected by GitHub."""

    def test_single_step_referencing_secrets(self) -> None:
        steps = GitHubSecretsProvider().credential_steps("us-east-1")
        assert len(steps) == 1
        assert steps[0].display_name == "Authenticate Via GitHub Secrets"
        assert steps[0].action.parameters == {
            "aws-region": "us-east-1",
            "aws-access-key-id": "${{ secrets.AWS_ACCESS_KEY_ID }}",
            "aws-secret-access-key": "${{ secrets.AWS_SECRET_ACCESS_KEY }}",
        }

    def test_custom_secret_names_and_session_token(self) -> None:
        provider = from_github_secrets("MY_KEY", "MY_SECRET", session_token="MY_TOKEN")
        params = provider.credential_steps("eu-west-1")[0].action.parameters
        assert params["aws-access-key-id"] == "${{ secrets.MY_KEY }}"
        assert params["aws-secret-access-key"] == "${{ secrets.MY_SECRET }}"
        assert params["aws-session-token"] == "${{ secrets.MY_TOKEN }}"

    def test_assume_role_adds_role_inputs(self) -> None:
        arn = "arn:aws:iam::123456789012:role/deploy"
        params = GitHubSecretsProvider().credential_steps("us-east-1", arn)[0].action.parameters
        assert params["role-to-assume"] == arn
        assert params["role-external-id"] == "Pipeline"
        assert params["role-skip-session-tagging"] == "true"

    def test_deterministic(self) -> None:
        provider = GitHubSecretsProvider()
        assert provider.credential_steps("us-east-1", "arn:x") == provider.credential_steps("us-east-1", "arn:x")

    def test_needs_no_permissions(self) -> None:
        assert GitHubSecretsProvider().job_permissions() == {}

    def test_empty_secret_name_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            GitHubSecretsProvider(access_key_id="")


class TestOpenIdConnectProvider:
    ROLE = "arn:aws:iam::123456789012:role/github-actions"

    def test_single_step_without_deploy_role(self) -> None:
        steps = from_open_id_connect(self.ROLE).credential_steps("us-east-1")
        assert [s.display_name for s in steps] == ["Authenticate Via OIDC Role"]
        assert steps[0].action.parameters == {"aws-region": "us-east-1", "role-to-assume": self.ROLE}

    def test_deploy_role_chained(self) -> None:
        deploy = "arn:aws:iam::210987654321:role/cdk-deploy"
        steps = OpenIdConnectProvider(self.ROLE, role_session_name="pipeline").credential_steps("us-east-1", deploy)
        assert [s.display_name for s in steps] == ["Authenticate Via OIDC Role", "Assume CDK Deploy Role"]
        assert steps[0].action.parameters["role-session-name"] == "pipeline"
        chained = steps[1].action.parameters
        assert chained["role-to-assume"] == deploy
        assert chained["aws-access-key-id"] == "${{ env.AWS_ACCESS_KEY_ID }}"
        assert chained["role-external-id"] == "Pipeline"

    def test_requests_id_token_permission(self) -> None:
        assert OpenIdConnectProvider(self.ROLE).job_permissions()["id-token"] == "write"

    def test_missing_role_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            OpenIdConnectProvider("")


class TestStaticStepsProvider:
    def test_returns_copy_of_fixed_steps(self) -> None:
        steps = [sh("Auth", "true")]
        provider = StaticStepsProvider(steps)
        out = provider.credential_steps("us-east-1")
        out.append(sh("Extra", "false"))
        assert provider.credential_steps("us-east-1") == steps

    def test_default_is_empty(self) -> None:
        assert StaticStepsProvider().credential_steps("us-east-1") == []
