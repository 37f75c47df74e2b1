"""
Exception hierarchy for LumenTrace.

Configuration problems are raised before any pixel is traced; numeric
degeneracies during tracing are handled locally and never surface here.
"""


class LumenTraceError(Exception):
    """Base class for all LumenTrace errors."""
    pass


class ConfigurationError(LumenTraceError):
    """Invalid scene or render configuration (empty scene, bad dimensions,
    unbounded primitive)."""
    pass


class SceneParseError(ConfigurationError):
    """Error during scene description parsing."""
    pass


class RenderError(LumenTraceError):
    """The render scheduler could not produce a complete pixel grid."""
    pass
