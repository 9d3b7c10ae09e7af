"""
Tests for assemblyflow.model
=============================

Steps are inert records, but they carry one hard rule: exactly one of
action / command. These tests pin that rule and the emitted dict shape.
"""

import pytest

from assemblyflow.errors import StepDefinitionError
from assemblyflow.model import Action, Job, Step


class TestStepInvariants:
    """Construction-time checks on Step."""

    def test_command_step(self) -> None:
        step = Step("Build", command="make")
        assert step.kind == "command"
        assert step.action is None

    def test_action_step(self) -> None:
        step = Step("Checkout", action=Action("actions/checkout@v3"))
        assert step.kind == "action"
        assert step.command is None

    def test_neither_action_nor_command_rejected(self) -> None:
        with pytest.raises(StepDefinitionError):
            Step("Empty")

    def test_both_action_and_command_rejected(self) -> None:
        with pytest.raises(StepDefinitionError) as exc:
            Step("Both", action=Action("x/y@v1"), command="ls")
        assert exc.value.details["step"] == "Both"

    def test_empty_display_name_rejected(self) -> None:
        with pytest.raises(StepDefinitionError):
            Step("", command="ls")

    def test_steps_are_frozen(self) -> None:
        step = Step("Build", command="make")
        with pytest.raises(AttributeError):
            step.command = "rm -rf /"  # type: ignore[misc]


class TestStepSerialization:
    """Step.to_dict renders the GitHub workflow step shape."""

    def test_command_renders_run(self) -> None:
        assert Step("Build", command="make").to_dict() == {"name": "Build", "run": "make"}

    def test_action_renders_uses_and_with(self) -> None:
        step = Step("Upload", action=Action("actions/upload-artifact@v3", {"name": "a", "path": "p"}))
        assert step.to_dict() == {
            "name": "Upload",
            "uses": "actions/upload-artifact@v3",
            "with": {"name": "a", "path": "p"},
        }

    def test_action_without_parameters_omits_with(self) -> None:
        assert "with" not in Step("Checkout", action=Action("actions/checkout@v3")).to_dict()

    def test_parameter_order_preserved(self) -> None:
        params = {"z": "1", "a": "2", "m": "3"}
        rendered = Step("S", action=Action("x/y@v1", params)).to_dict()
        assert list(rendered["with"]) == ["z", "a", "m"]


class TestJob:
    def test_to_dict_omits_empty_sections(self) -> None:
        j = Job("build", steps=[Step("Build", command="make")])
        assert j.to_dict() == {"steps": [{"name": "Build", "run": "make"}]}

    def test_to_dict_includes_needs_permissions_env(self) -> None:
        j = Job(
            "deploy",
            steps=[Step("Deploy", command="cdk deploy")],
            needs=["build"],
            env={"CI": "true"},
            permissions={"id-token": "write"},
        )
        out = j.to_dict()
        assert out["needs"] == ["build"]
        assert out["env"] == {"CI": "true"}
        assert out["permissions"] == {"id-token": "write"}


class TestActionParameters:
    """Action inputs are a private, read-only copy."""

    def test_steps_are_hashable(self) -> None:
        a = Step("Upload", action=Action("actions/upload-artifact@v3", {"name": "a", "path": "p"}))
        b = Step("Upload", action=Action("actions/upload-artifact@v3", {"name": "a", "path": "p"}))
        assert hash(a) == hash(b)
        assert len({a, b}) == 1

    def test_parameters_read_only(self) -> None:
        action = Action("x/y@v1", {"k": "v"})
        with pytest.raises(TypeError):
            action.parameters["k"] = "changed"  # type: ignore[index]

    def test_source_dict_not_shared(self) -> None:
        params = {"k": "v"}
        action = Action("x/y@v1", params)
        params["k"] = "changed"
        assert action.parameters == {"k": "v"}

    def test_to_dict_returns_plain_dict(self) -> None:
        rendered = Step("S", action=Action("x/y@v1", {"k": "v"})).to_dict()
        assert type(rendered["with"]) is dict
