# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AssemblyFlowError(Exception):
    """
    Structured error with enough context for:
      - clean CLI output
      - pointing at the offending option without a traceback
    """
    kind: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class ConfigurationError(AssemblyFlowError):
    """A strategy or provider was built with unusable settings."""
    kind: str = "configuration"
    message: str = ""
    details: dict = field(default_factory=dict)


@dataclass
class StepDefinitionError(AssemblyFlowError):
    kind: str = "step_definition"
    message: str = ""
    details: dict = field(default_factory=dict)


def config_error(message: str, **details) -> ConfigurationError:
    return ConfigurationError(message=message, details=details)
