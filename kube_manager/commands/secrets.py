"""Secret modes - read and update keys of the app's Kubernetes Secret"""

import base64
import logging

import typer
from kubernetes import client
from rich.console import Console

from kube_manager.modes import Invocation

console = Console()
err_console = Console(stderr=True)
log = logging.getLogger("kube_manager")


def read_secret_data(v1: client.CoreV1Api, name: str, namespace: str) -> dict[str, str]:
    """Read a Secret and return its `data` entries base64-decoded."""
    log.debug("Reading secret %s/%s", namespace, name)
    secret = v1.read_namespaced_secret(name=name, namespace=namespace)
    return {
        key: base64.b64decode(value).decode("utf-8", errors="replace")
        for key, value in (secret.data or {}).items()
    }


def get_secret(invocation: Invocation, v1: client.CoreV1Api, pod: str) -> int:
    """Print KEY=value for the requested key; print nothing when the key is absent."""
    err_console.print(
        f"Fetching environment variable '{invocation.env_var}' from secret '{invocation.app}' "
        f"in namespace {invocation.namespace}...",
        markup=False,
    )
    data = read_secret_data(v1, invocation.app, invocation.namespace)

    if invocation.env_var in data:
        typer.echo(f"{invocation.env_var}={data[invocation.env_var]}")
    else:
        log.debug("Key %s not present in secret %s", invocation.env_var, invocation.app)
    return 0


def set_secret(invocation: Invocation, v1: client.CoreV1Api, pod: str) -> int:
    """
    Set one key of the app's Secret.

    The value is sent in plaintext under `stringData`; the API server encodes
    it into `data` and leaves every other key untouched.
    """
    err_console.print(
        f"Setting environment variable '{invocation.env_var}' in secret '{invocation.app}' "
        f"in namespace {invocation.namespace}...",
        markup=False,
    )
    body = {"stringData": {invocation.env_var: invocation.env_value}}
    log.debug("Patching secret %s/%s key %s", invocation.namespace, invocation.app, invocation.env_var)
    v1.patch_namespaced_secret(name=invocation.app, namespace=invocation.namespace, body=body)

    console.print(f"[green]✓[/green] Secret '{invocation.app}' updated")
    return 0
