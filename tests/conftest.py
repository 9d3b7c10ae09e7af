"""
Shared Test Fixtures for assemblyflow
======================================

Strategies and providers used across the suite. Every fixture builds a fresh
instance so tests never share a seed by accident.
"""

from __future__ import annotations

import os

import pytest

from assemblyflow.credentials import GitHubSecretsProvider, StaticStepsProvider
from assemblyflow.dsl import sh
from assemblyflow.strategies import NativeTransferStrategy, ObjectStorageTransferStrategy


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep ASSEMBLYFLOW_* variables from the outer shell out of the tests."""
    for key in list(os.environ):
        if key.startswith("ASSEMBLYFLOW_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def native():
    return NativeTransferStrategy()


@pytest.fixture
def auth_steps():
    return [sh("Fake auth", "echo authenticated")]


@pytest.fixture
def static_provider(auth_steps):
    return StaticStepsProvider(auth_steps)


@pytest.fixture
def s3(static_provider):
    """Object storage strategy matching the documented example (seed r1)."""
    return ObjectStorageTransferStrategy(
        bucket="ci-assembly",
        region="us-east-1",
        seed="r1",
        credentials_provider=static_provider,
    )


@pytest.fixture
def s3_with_secrets():
    return ObjectStorageTransferStrategy(
        bucket="ci-assembly",
        region="eu-west-1",
        seed="r1",
        assume_role_arn="arn:aws:iam::123456789012:role/deploy",
        credentials_provider=GitHubSecretsProvider(),
    )
