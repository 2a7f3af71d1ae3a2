"""Recursive traversal of the virtual directory tree."""

from .walker import S3Walker, Visitor, WalkAction, WalkResult, WalkState

__all__ = ["S3Walker", "Visitor", "WalkAction", "WalkResult", "WalkState"]
