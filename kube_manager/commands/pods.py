"""Pod lookup by app label"""

import logging

from kubernetes import client

from kube_manager.errors import KubeManagerError

log = logging.getLogger("kube_manager")


def resolve_pod(v1: client.CoreV1Api, app: str, namespace: str) -> str:
    """
    Return the name of the first pod labelled app=<app> in the namespace.

    This is a single query: no retries and no waiting for the pod to become
    ready. When several pods match, the first one the API returns is used.
    """
    selector = f"app={app}"
    log.debug("Listing pods in %s with selector %s", namespace, selector)
    pods = v1.list_namespaced_pod(namespace=namespace, label_selector=selector, watch=False)

    if not pods.items:
        raise KubeManagerError(f"No pod found for app '{app}' in namespace '{namespace}'.")

    return pods.items[0].metadata.name
