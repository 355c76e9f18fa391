"""Errors raised by kube-manager operations"""


class KubeManagerError(Exception):
    """Raised when an operation cannot complete. The CLI prints the message and exits with 1."""
    pass


class UsageError(KubeManagerError):
    """Raised for invalid or missing command-line input. Usage is printed along with the message."""
    pass
