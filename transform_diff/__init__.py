"""
transform_diff package - installer transform diff extraction

Expose the controller that reports the Property table changes a transform
makes to a base installer database.
"""
from .controller import TransformDiffController
from .errors import OpenFailure, TransformNotFound, TransformViewUnsupported, ChangeLogUnavailable

__all__ = [
    "TransformDiffController",
    "OpenFailure",
    "TransformNotFound",
    "TransformViewUnsupported",
    "ChangeLogUnavailable",
]
