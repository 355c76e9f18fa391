"""Main CLI entry point for kube-manager"""

import logging
import os
from pathlib import Path
from typing import Callable, List, Optional

import click
import typer
from typer.core import TyperCommand
from kubernetes import client
from kubernetes.client.rest import ApiException
from kubernetes.config import ConfigException
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from kube_manager.commands import environments, postgres, secrets, shell
from kube_manager.commands.pods import resolve_pod
from kube_manager.errors import KubeManagerError, UsageError
from kube_manager.kube import core_api
from kube_manager.modes import Invocation, Mode, parse_mode, valid_modes, validate

err_console = Console(stderr=True)
log = logging.getLogger("kube_manager")

app = typer.Typer(
    name="kube-manager",
    help="Kubernetes pod and environment management tool",
    add_completion=False,
    pretty_exceptions_enable=False,
)

LOCAL_MODES: dict[Mode, Callable[[Invocation], int]] = {
    Mode.SWITCH_ENV: environments.switch_env,
    Mode.VERIFY_ENV: environments.verify_env,
}

POD_MODES: dict[Mode, Callable[[Invocation, client.CoreV1Api, str], int]] = {
    Mode.BASH: shell.open_bash,
    Mode.RAILS: shell.open_rails_console,
    Mode.GET_SECRET: secrets.get_secret,
    Mode.SET_SECRET: secrets.set_secret,
    Mode.GET_BRANCH: shell.get_branch,
    Mode.POSTGRES_LOGIN: postgres.postgres_login,
}


def configure_logging(verbose: bool):
    if not log.handlers:
        log.addHandler(RichHandler(console=err_console, show_path=False, show_time=False))
    log.setLevel(logging.DEBUG if verbose else logging.WARNING)


def dispatch(invocation: Invocation) -> int:
    """Run the handler for the invocation's mode and return the process exit status."""
    mode = invocation.mode
    if mode in LOCAL_MODES:
        return LOCAL_MODES[mode](invocation) or 0

    v1 = core_api(context=invocation.context, kubeconfig=invocation.kubeconfig)
    pod = resolve_pod(v1, invocation.app, invocation.namespace)
    log.debug("Resolved app %s to pod %s", invocation.app, pod)
    return POD_MODES[mode](invocation, v1, pod) or 0


def describe_error(error: Exception) -> str:
    if isinstance(error, ApiException):
        return f"Kubernetes API returned {error.status}: {error.reason}"
    return str(error)


def active_kubeconfig(value: Path) -> Path:
    """First entry of a KUBECONFIG-style path list; that file is the one switch-env replaces."""
    first = next((entry for entry in str(value).split(os.pathsep) if entry), str(value))
    return Path(first).expanduser()


def _help_callback(ctx: typer.Context, value: bool):
    if value and not ctx.resilient_parsing:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)


class KubeManagerCommand(TyperCommand):
    """Reports flag parsing errors like every other usage error: message, usage, exit 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            err_console.print(f"[red]Error: {escape(e.format_message())}[/red]")
            typer.echo(ctx.get_help())
            raise typer.Exit(code=1)


@app.command(
    cls=KubeManagerCommand,
    add_help_option=False,
    context_settings={"allow_interspersed_args": False},
)
def kube_manager_wrapper(
    ctx: typer.Context,
    app_name: Optional[str] = typer.Option(
        None, "-a", "--app", help="Application name (required, except for switch-env and verify-env)"
    ),
    namespace: str = typer.Option(
        "default", "-n", "--namespace", help="Kubernetes namespace"
    ),
    mode: Optional[str] = typer.Option(
        None, "-m", "--mode", help=f"Mode to run: {', '.join(valid_modes())}"
    ),
    env_var: Optional[str] = typer.Option(
        None, "-e", "--env-var", help="Secret key (required for get-secret and set-secret)"
    ),
    env_value: Optional[str] = typer.Option(
        None, "-v", "--value", help="Value to set (required for set-secret)"
    ),
    context: Optional[str] = typer.Option(
        None, "-c", "--context", envvar="KUBE_MANAGER_CONTEXT", help="Kubernetes context to use"
    ),
    config_dir: Path = typer.Option(
        Path.home() / ".kube", "--config-dir", envvar="KUBE_MANAGER_CONFIG_DIR",
        help="Directory holding the environment YAML files used by switch-env. "
        "Files are numbered oldest first by modification time, so rewriting a file moves it to the end",
    ),
    kubeconfig: Path = typer.Option(
        Path.home() / ".kube" / "config", "--kubeconfig", envvar="KUBECONFIG",
        help="Active kubeconfig file (the first entry when given a path list)",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Log every Kubernetes call and kubectl command"
    ),
    command: Optional[List[str]] = typer.Argument(
        None, help="Command to run through bash -c (bash mode only)"
    ),
    help_: bool = typer.Option(
        False, "--help", is_eager=True, expose_value=False, callback=_help_callback,
        help="Show this message and exit",
    ),
):
    """
    Open shells, Rails consoles and psql sessions in an app's pod, read and
    write its secrets, find its deployed branch, and switch kubeconfig
    environments.

    Examples: -a my-app -m bash | -a my-app -m get-secret -e SECRET_KEY_BASE |
    -a my-app -m set-secret -e SECRET_KEY_BASE -v value | -m switch-env
    """
    configure_logging(verbose)

    try:
        invocation = Invocation(
            mode=parse_mode(mode),
            app=app_name,
            namespace=namespace,
            env_var=env_var,
            env_value=env_value,
            command=list(command or []),
            context=context,
            kubeconfig=active_kubeconfig(kubeconfig),
            config_dir=config_dir.expanduser(),
        )
        validate(invocation)
    except UsageError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)

    try:
        code = run(invocation)
    except (KubeManagerError, ApiException, ConfigException) as e:
        err_console.print(f"[red]Error: {escape(describe_error(e))}[/red]")
        raise typer.Exit(code=1)

    raise typer.Exit(code=code)


def run(invocation: Invocation) -> int:
    if invocation.command and invocation.mode is not Mode.BASH:
        log.warning("Ignoring trailing command %r: only bash mode runs commands", " ".join(invocation.command))
    return dispatch(invocation)


def main():
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
