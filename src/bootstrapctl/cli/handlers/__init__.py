"""
This module contains the handler functions for the CLI commands.
"""
from .exec import exec_in_pod
from .find import find_resource
from .secret import get_secret
from .wait import wait_for_resource

__all__ = [
    "exec_in_pod",
    "find_resource",
    "get_secret",
    "wait_for_resource",
]
