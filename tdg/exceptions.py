"""
Error Types

Typed failures surfaced by the profiling engine and its collaborators.
I/O problems are reported with the built-in OSError.
"""


class TdgError(Exception):
    """Base class for all test data generation errors"""


class FormatError(TdgError):
    """Archive is missing, truncated, corrupt or has an incompatible version"""


class SchemaError(TdgError):
    """Row width does not match the established column count"""


class NotReadyError(TdgError):
    """Generation requested before the sampling index was compiled"""
