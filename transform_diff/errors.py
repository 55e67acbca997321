"""
Error taxonomy for the transform diff extractor.

Fatal errors abort the run; recoverable ones are turned into report warnings
by the controller.
"""


class TransformDiffError(Exception):
    """Base class for all extractor errors"""
    recoverable = False

    def __init__(self, operation: str, target: str, reason: str = ""):
        self.operation = operation
        self.target = target
        self.reason = reason
        message = f"{operation} failed for {target}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class OpenFailure(TransformDiffError):
    """Base database path missing, unreadable or not a database"""

    def __init__(self, path: str, reason: str = ""):
        super().__init__("OpenDatabase", path, reason)
        self.path = path


class TransformNotFound(TransformDiffError):
    """Transform path given but does not exist"""

    def __init__(self, path: str):
        super().__init__("ApplyTransformView", path, "transform file does not exist")
        self.path = path


class TransformViewUnsupported(TransformDiffError):
    """The change-log table could not be materialized for this transform"""
    recoverable = True

    def __init__(self, path: str, reason: str = ""):
        super().__init__("ApplyTransformView", path, reason)
        self.path = path


class ChangeLogUnavailable(TransformDiffError):
    """Change-log table absent after apply"""
    recoverable = True

    def __init__(self, table: str, reason: str = "table does not exist"):
        super().__init__("ReadChangeLog", table, reason)
        self.table = table
