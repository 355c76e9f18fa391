"""Postgres login mode - open psql in the app's pod with credentials from its Secret"""

import logging

from kubernetes import client
from kubernetes.client.rest import ApiException
from rich.console import Console

from kube_manager.commands.secrets import read_secret_data
from kube_manager.errors import KubeManagerError
from kube_manager.kube import kubectl_exec
from kube_manager.modes import Invocation

err_console = Console(stderr=True)
log = logging.getLogger("kube_manager")

URL_KEY = "DATABASE_URL"
PG_KEYS = ("PGDATABASE", "PGHOST", "PGPASSWORD", "PGPORT", "PGUSER")


def psql_command(data: dict[str, str]) -> list[str]:
    """
    Build the in-pod psql command line from decoded secret data.

    DATABASE_URL wins when present. Otherwise all five PG* keys must be set.
    """
    url = data.get(URL_KEY)
    if url:
        return ["env", f"{URL_KEY}={url}", "psql", url]

    if all(data.get(key) for key in PG_KEYS):
        return [
            "env",
            *(f"{key}={data[key]}" for key in PG_KEYS),
            "psql",
            "-h", data["PGHOST"],
            "-U", data["PGUSER"],
            "-d", data["PGDATABASE"],
            "-p", data["PGPORT"],
        ]

    raise KubeManagerError("Required database credentials are not found in secrets.")


def postgres_login(invocation: Invocation, v1: client.CoreV1Api, pod: str) -> int:
    try:
        data = read_secret_data(v1, invocation.app, invocation.namespace)
    except ApiException as e:
        if e.status != 404:
            raise
        log.debug("Secret %s/%s does not exist", invocation.namespace, invocation.app)
        data = {}

    command = psql_command(data)
    if data.get(URL_KEY):
        err_console.print(f"Connecting using {URL_KEY}...")
    else:
        err_console.print("Connecting using individual PostgreSQL environment variables...")

    return kubectl_exec(
        pod,
        invocation.namespace,
        command,
        context=invocation.context,
        kubeconfig=invocation.kubeconfig,
        redact=True,
    )
