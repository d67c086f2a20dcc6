"""
Exceptions that abort a whole scan.

Per-probe failures are never raised; they are reported as closed ports.
"""


class ScanError(Exception):
    """Base class for errors that prevent a scan from starting."""


class TargetResolutionError(ScanError):
    """The target could not be turned into a reachable address."""

    def __init__(self, target: str, reason: str = ""):
        self.target = target
        self.reason = reason
        message = f"Could not resolve target '{target}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PortValidationError(ScanError, ValueError):
    """A port, port list or port range is malformed or out of bounds."""
