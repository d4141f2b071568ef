"""Post TargetProcess comments for git commits, once per commit."""

__version__ = "0.1.0"
