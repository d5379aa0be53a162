"""Resolve the context a command operates on."""

from __future__ import annotations

import os
from typing import Sequence, Tuple

from . import config
from .auth import Authenticator
from .config import Context


def resolve_target_path(args: Sequence[str]) -> str:
    """Return the first positional argument, or the working directory."""

    if args and args[0]:
        return args[0]
    return os.getcwd()


def initialize_context(args: Sequence[str], authenticator: Authenticator) -> Context:
    """Create a fresh context at the target path."""

    return config.initialize(resolve_target_path(args), authenticator)


def discover_context(args: Sequence[str]) -> Tuple[Context, str]:
    """Find the enclosing context and the target path relative to its root.

    The relative path is ``""`` when no positional argument was given, which
    means the whole root.
    """

    context = config.discover(resolve_target_path(args))
    relative_path = ""
    if args and args[0]:
        relative_path = context.relative(args[0])
    return context, relative_path
