"""Environment modes - switch and inspect the active kubeconfig"""

import logging
import shutil
from pathlib import Path

import yaml
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from kube_manager.errors import KubeManagerError
from kube_manager.modes import Invocation

console = Console()
log = logging.getLogger("kube_manager")


def list_environments(config_dir: Path) -> dict[int, Path]:
    """
    Number the *.yaml files in config_dir from 1.

    Files are ordered oldest first by modification time (name breaks ties),
    so adding a new environment file does not renumber the existing ones.
    """
    files = sorted(config_dir.glob("*.yaml"), key=lambda path: (path.stat().st_mtime, path.name))
    return {number: path for number, path in enumerate(files, start=1)}


def switch_env(invocation: Invocation) -> int:
    """Prompt for one of the stored environments and copy it over the active kubeconfig."""
    environments = list_environments(invocation.config_dir)
    if not environments:
        raise KubeManagerError(f"No environment files (*.yaml) found in {invocation.config_dir}.")

    console.print("Available environments:")
    for number, path in environments.items():
        console.print(f"{number}) {path.stem}", markup=False)

    try:
        choice = Prompt.ask("Select the environment (enter the number)", console=console)
        selected = environments.get(int(choice.strip()))
    except (ValueError, EOFError):
        selected = None

    if selected is None:
        raise KubeManagerError("Invalid selection.")

    kubeconfig = invocation.kubeconfig
    log.debug("Copying %s to %s", selected, kubeconfig)
    kubeconfig.parent.mkdir(parents=True, exist_ok=True)
    if not (kubeconfig.exists() and kubeconfig.samefile(selected)):
        shutil.copyfile(selected, kubeconfig)

    console.print(f"[green]Switched to environment: {escape(selected.stem)}[/green]")
    return 0


def current_context(kubeconfig: Path) -> str:
    """Return the current-context name recorded in a kubeconfig file."""
    if not kubeconfig.is_file():
        raise KubeManagerError(f"Kubeconfig {kubeconfig} not found.")

    try:
        with kubeconfig.open() as fh:
            data = yaml.safe_load(fh)
    except yaml.YAMLError as e:
        raise KubeManagerError(f"Could not parse {kubeconfig}: {e}") from None

    name = data.get("current-context") if isinstance(data, dict) else None
    if not name:
        raise KubeManagerError(f"No current-context set in {kubeconfig}.")

    return str(name)


def verify_env(invocation: Invocation) -> int:
    name = current_context(invocation.kubeconfig)
    console.print(f"The current environment is [bold]{escape(name)}[/bold]")
    return 0
