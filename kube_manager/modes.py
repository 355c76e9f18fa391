"""Modes supported by kube-manager and the input each of them requires"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from kube_manager.errors import UsageError


class Mode(str, Enum):
    BASH = "bash"
    RAILS = "rails"
    GET_SECRET = "get-secret"
    SET_SECRET = "set-secret"
    SWITCH_ENV = "switch-env"
    VERIFY_ENV = "verify-env"
    GET_BRANCH = "get-branch"
    POSTGRES_LOGIN = "postgres-login"

    @property
    def needs_pod(self) -> bool:
        """Whether the mode talks to a pod of the app (and therefore needs -a)."""
        return self not in (Mode.SWITCH_ENV, Mode.VERIFY_ENV)

    @property
    def required_fields(self) -> tuple[str, ...]:
        fields = ("app",) if self.needs_pod else ()
        return fields + _EXTRA_FIELDS.get(self, ())


_EXTRA_FIELDS = {
    Mode.GET_SECRET: ("env_var",),
    Mode.SET_SECRET: ("env_var", "env_value"),
}

FLAG_NAMES = {
    "app": "-a <app-name>",
    "env_var": "-e <env-var>",
    "env_value": "-v <value>",
}


@dataclass(frozen=True)
class Invocation:
    """Everything a single run of the tool acts on, as parsed from the command line."""

    mode: Mode
    app: str | None = None
    namespace: str = "default"
    env_var: str | None = None
    env_value: str | None = None
    command: list[str] = field(default_factory=list)
    context: str | None = None
    kubeconfig: Path = Path.home() / ".kube" / "config"
    config_dir: Path = Path.home() / ".kube"


def valid_modes() -> list[str]:
    return [mode.value for mode in Mode]


def parse_mode(value: str | None) -> Mode:
    """Turn the -m argument into a Mode, raising UsageError for anything unknown."""
    if not value:
        raise UsageError(f"A mode is required (-m). Valid modes are: {', '.join(valid_modes())}.")
    try:
        return Mode(value)
    except ValueError:
        raise UsageError(
            f"Invalid mode '{value}'. Valid modes are: {', '.join(valid_modes())}."
        ) from None


def validate(invocation: Invocation) -> None:
    """Check that every field the selected mode needs was supplied."""
    missing = [name for name in invocation.mode.required_fields if not getattr(invocation, name)]
    if missing:
        flags = " and ".join(FLAG_NAMES[name] for name in missing)
        raise UsageError(f"Mode '{invocation.mode.value}' requires {flags}.")
