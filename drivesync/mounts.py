"""Graft directories from outside the sync tree into it for a single push."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .errors import MountResolutionError
from .logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class MountPoint:
    """A local path linked into the tree under a root-relative name."""

    name: str
    local_path: str
    mount_path: str
    can_clean: bool = True


@dataclass
class Mount:
    """Mount points created for one push, plus what must be undone afterwards."""

    points: List[MountPoint] = field(default_factory=list)
    created_mount_dir: Optional[str] = None
    shortest_mount_root: str = ""
    # Every directory created for the mount, deepest first.
    created_dirs: List[str] = field(default_factory=list)

    def cleanup(self) -> None:
        """Remove the links and directories this mount created."""

        for point in self.points:
            if not point.can_clean:
                continue
            try:
                if os.path.islink(point.mount_path):
                    os.unlink(point.mount_path)
            except OSError as exc:
                logger.warning("mount.cleanup_failed", mount_path=point.mount_path, error=str(exc))

        for directory in self.created_dirs:
            try:
                os.rmdir(directory)
            except OSError as exc:
                logger.warning("mount.cleanup_failed", mount_path=directory, error=str(exc))
                break


def _is_hidden(path: str) -> bool:
    return os.path.basename(os.path.normpath(path)).startswith(".")


def _missing_dirs(path: str) -> List[str]:
    """Return ``path`` and each missing ancestor, deepest first."""

    missing: List[str] = []
    current = os.path.normpath(path)
    while not os.path.exists(current):
        missing.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return missing


def resolve_mount_points(
    context_path: str,
    context_abs_path: str,
    names: Sequence[str],
    include_hidden: bool,
) -> Tuple[Optional[Mount], List[str]]:
    """Link every name into ``context_abs_path`` and return the push sources.

    ``context_path`` is the mount directory relative to the context root and
    ``context_abs_path`` is the same directory on disk. Each source is rooted
    at the context root, e.g. ``/photos/2013`` for name ``~/2013`` mounted
    under ``photos``.
    """

    if not names:
        return None, []

    mount = Mount()
    missing = _missing_dirs(context_abs_path)
    if missing:
        try:
            os.makedirs(context_abs_path, mode=0o755)
        except OSError as exc:
            raise MountResolutionError(f"Cannot create mount directory {context_abs_path}: {exc}") from exc
        mount.created_mount_dir = context_abs_path
        mount.created_dirs = missing

    sources: List[str] = []
    visited = set()
    linked = {}

    try:
        for name in names:
            local_path = os.path.abspath(os.path.expanduser(name))
            if local_path in visited:
                continue
            visited.add(local_path)

            if not os.path.exists(local_path):
                raise MountResolutionError(f"{name} is neither a known mount nor an existing path")

            if not include_hidden and _is_hidden(local_path):
                logger.debug("mount.hidden_skipped", name=name)
                continue

            base = os.path.basename(os.path.normpath(local_path))
            mount_path = os.path.join(context_abs_path, base)
            if mount_path in linked:
                raise MountResolutionError(
                    f"{name} and {linked[mount_path]} would both be mounted at {mount_path}"
                )

            can_clean = True
            try:
                os.symlink(local_path, mount_path)
            except FileExistsError:
                if os.path.realpath(mount_path) != os.path.realpath(local_path):
                    raise MountResolutionError(
                        f"Cannot mount {name}: {mount_path} already exists and points elsewhere"
                    )
                # The existing link already grafts this path; it is kept after the push.
                can_clean = False
            except OSError as exc:
                raise MountResolutionError(f"Cannot mount {name} at {mount_path}: {exc}") from exc
            linked[mount_path] = name

            rel_path = os.path.join(context_path, base) if context_path else base
            rooted = "/" + rel_path.replace(os.sep, "/")
            sources.append(rooted)
            if not mount.shortest_mount_root or len(rooted) < len(mount.shortest_mount_root):
                mount.shortest_mount_root = rooted

            mount.points.append(
                MountPoint(name=rel_path, local_path=local_path, mount_path=mount_path, can_clean=can_clean)
            )
    except MountResolutionError:
        mount.cleanup()
        raise

    if not mount.points:
        mount.cleanup()
        return None, []
    return mount, sources
