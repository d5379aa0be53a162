"""Compute what a push acts on."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .config import Context
from .mounts import Mount, resolve_mount_points


@dataclass(frozen=True)
class PushArgs:
    """Positional push arguments split into their roles.

    ``context_args`` locate the context, ``rest`` names directories to mount
    and ``sources`` holds root-rooted paths pushed as they are. A mounted
    push leaves ``sources`` empty; a plain push leaves ``rest`` empty.
    """

    context_args: Tuple[str, ...]
    rest: Tuple[str, ...]
    sources: Tuple[str, ...]
    mounted: bool = False


def split_push_args(args: Sequence[str], mounted_push: bool) -> PushArgs:
    """Split ``args`` for either a mounted or a plain recursive push.

    With ``mounted_push`` and at least one argument, the last argument is the
    context path and the ones before it are mount names. Otherwise every
    argument is both a context argument and a source under the root.
    """

    args = tuple(args)
    if mounted_push and len(args) >= 1:
        return PushArgs(context_args=args[-1:], rest=args[:-1], sources=(), mounted=True)
    return PushArgs(context_args=args, rest=(), sources=tuple("/" + path for path in args))


def build_push_sources(
    context: Context,
    relative_path: str,
    push_args: PushArgs,
    hidden: bool,
) -> Tuple[Optional[Mount], List[str]]:
    """Resolve mounts under ``relative_path`` and return the final source list."""

    mount, aux_sources = resolve_mount_points(
        relative_path,
        context.absolute(relative_path),
        push_args.rest,
        hidden,
    )
    return mount, [*push_args.sources, *aux_sources]
