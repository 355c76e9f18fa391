"""Cluster access: Kubernetes API clients and kubectl sessions"""

import logging
import shlex
import subprocess
from pathlib import Path

from kubernetes import client, config

from kube_manager.errors import KubeManagerError

log = logging.getLogger("kube_manager")


def core_api(context: str | None = None, kubeconfig: Path | None = None) -> client.CoreV1Api:
    """Load kubeconfig and return a CoreV1Api client for it."""
    log.debug("Loading kubeconfig %s (context: %s)", kubeconfig or "default", context or "current")
    config.load_kube_config(
        config_file=str(kubeconfig) if kubeconfig else None,
        context=context,
    )
    return client.CoreV1Api()


def kubectl_command(
    args: list[str],
    context: str | None = None,
    kubeconfig: Path | None = None,
) -> list[str]:
    cmd = ["kubectl"]
    if kubeconfig:
        cmd.extend(["--kubeconfig", str(kubeconfig)])
    if context:
        cmd.extend(["--context", context])
    return cmd + args


def kubectl_exec(
    pod: str,
    namespace: str,
    command: list[str],
    interactive: bool = True,
    context: str | None = None,
    kubeconfig: Path | None = None,
    redact: bool = False,
) -> int:
    """
    Run a command in a pod through `kubectl exec` and return its exit status.

    Interactive sessions get a TTY and stdin, so shells, consoles and psql
    behave as if started locally. Terminal signals reach kubectl through the
    normal foreground process group.
    """
    args = ["exec"]
    if interactive:
        args.append("-it")
    args.extend([pod, "-n", namespace, "--", *command])
    cmd = kubectl_command(args, context=context, kubeconfig=kubeconfig)

    if redact:
        # command carries credentials
        log.debug("Running: %s -- %s", shlex.join(cmd[: len(cmd) - len(command) - 1]), command[0])
    else:
        log.debug("Running: %s", shlex.join(cmd))

    try:
        return subprocess.call(cmd)
    except FileNotFoundError:
        raise KubeManagerError("kubectl not found. Please ensure it is installed and in your PATH.") from None
