"""Shell modes - bash sessions, Rails console and deployed branch lookup"""

import logging
import shlex

import typer
from kubernetes import client
from kubernetes.stream import stream
from rich.console import Console

from kube_manager.errors import KubeManagerError
from kube_manager.kube import kubectl_exec
from kube_manager.modes import Invocation

err_console = Console(stderr=True)
log = logging.getLogger("kube_manager")

RAILS_CONSOLE = ["bash", "-c", "rails c"]
BRANCH_QUERY = ["bash", "-c", "git branch -r --contains HEAD"]


def open_bash(invocation: Invocation, v1: client.CoreV1Api, pod: str) -> int:
    """Open a bash session in the pod, or run the trailing command through bash -c."""
    where = f"on pod {pod} for app {invocation.app} in namespace {invocation.namespace}"

    if invocation.command:
        # words are joined as a bash script, so pipes and globs behave as typed
        cmd = " ".join(invocation.command)
        err_console.print(f"Executing command '{cmd}' in bash session {where}...", markup=False)
        return kubectl_exec(
            pod,
            invocation.namespace,
            ["bash", "-c", cmd],
            interactive=False,
            context=invocation.context,
            kubeconfig=invocation.kubeconfig,
        )

    err_console.print(f"Opening bash session {where}...", markup=False)
    return kubectl_exec(
        pod,
        invocation.namespace,
        ["bash"],
        context=invocation.context,
        kubeconfig=invocation.kubeconfig,
    )


def open_rails_console(invocation: Invocation, v1: client.CoreV1Api, pod: str) -> int:
    err_console.print(
        f"Opening Rails console on pod {pod} for app {invocation.app} in namespace {invocation.namespace}...",
        markup=False,
    )
    return kubectl_exec(
        pod,
        invocation.namespace,
        RAILS_CONSOLE,
        context=invocation.context,
        kubeconfig=invocation.kubeconfig,
    )


def get_branch(invocation: Invocation, v1: client.CoreV1Api, pod: str) -> int:
    """
    Print the remote branch(es) containing the commit checked out in the pod.

    The query runs through the exec API without a TTY, so only git's stdout is
    captured. Empty output means the commit is on no known remote branch.
    """
    err_console.print(
        f"Fetching deployed branch from pod {pod} for app {invocation.app} in namespace {invocation.namespace}...",
        markup=False,
    )
    log.debug("Exec in %s/%s: %s", invocation.namespace, pod, shlex.join(BRANCH_QUERY))
    output = stream(
        v1.connect_get_namespaced_pod_exec,
        pod,
        invocation.namespace,
        command=BRANCH_QUERY,
        stderr=False,
        stdin=False,
        stdout=True,
        tty=False,
    )

    branches = [line.strip() for line in (output or "").splitlines() if line.strip()]
    if not branches:
        raise KubeManagerError("Could not find the branch containing the current HEAD commit.")

    typer.echo(f"Deployed branch: {', '.join(branches)}")
    return 0
