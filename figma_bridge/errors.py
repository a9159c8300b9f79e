"""
Exceptions raised by the composition → HTML pipeline.

Malformed input from the extraction side is a CompositionError; broken
internal contracts found while rendering (e.g. a wrapper without a centering
strategy) are RenderError. Both derive from BridgeError so callers can treat
any of them as a build-level failure.
"""


class BridgeError(Exception):
    """Base class for pipeline failures."""


class CompositionError(BridgeError, ValueError):
    """The composition payload or one of its nodes is malformed."""


class RenderError(BridgeError, RuntimeError):
    """An IR contract was violated while producing HTML."""
