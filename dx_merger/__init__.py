"""
dx_merger package

Provides the CLI entrypoint (`python -m dx_merger`) that merges package
directories and custom labels into a project's default package.
"""

from .cli import main

__all__ = ["main"]
