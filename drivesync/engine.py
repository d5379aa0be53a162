"""Boundary between command dispatch and the synchronisation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Protocol, Tuple

from rich.console import Console
from rich.table import Table

from .config import Context
from .logging import get_logger
from .mounts import Mount


@dataclass(frozen=True)
class Options:
    """Everything an engine operation needs besides the context."""

    path: str = ""
    is_recursive: bool = True
    is_no_prompt: bool = False
    hidden: bool = False
    mounts: Optional[Mount] = None
    sources: Tuple[str, ...] = field(default_factory=tuple)


class SyncEngine(Protocol):
    """Operations run against the remote store."""

    def init(self) -> None:
        ...

    def pull(self) -> None:
        ...

    def push(self) -> None:
        ...

    def diff(self) -> None:
        ...

    def publish(self) -> None:
        ...


EngineFactory = Callable[[Context, Options], SyncEngine]


class EngineRegistry:
    """Registry of engine implementations selectable per context."""

    def __init__(self) -> None:
        self._registry: Dict[str, EngineFactory] = {}

    def register(self, name: str, factory: EngineFactory) -> None:
        if name in self._registry:
            raise ValueError(f"Engine already registered: {name}")
        self._registry[name] = factory

    def get(self, name: str) -> EngineFactory:
        try:
            return self._registry[name]
        except KeyError as exc:
            raise KeyError(f"Unknown engine: {name}") from exc

    def names(self) -> Iterable[str]:
        return self._registry.keys()


class ReportingEngine:
    """Engine that shows what each operation would act on without touching the remote."""

    def __init__(self, context: Context, options: Options, console: Optional[Console] = None) -> None:
        self.context = context
        self.options = options
        self.console = console or Console()
        self.logger = get_logger("drivesync.engine").bind(root=context.abs_path, path=options.path)

    def _report(self, operation: str) -> None:
        table = Table(title=f"gd {operation}")
        table.add_column("Setting", style="cyan", no_wrap=True)
        table.add_column("Value")
        table.add_row("Root", self.context.abs_path)
        table.add_row("Path", "/" + self.options.path.replace("\\", "/"))
        if operation in {"pull", "push"}:
            table.add_row("Recursive", str(self.options.is_recursive))
            table.add_row("No prompt", str(self.options.is_no_prompt))
        if operation == "push":
            table.add_row("Hidden", str(self.options.hidden))
            table.add_row("Sources", "\n".join(self.options.sources) or "-")
            points = self.options.mounts.points if self.options.mounts else []
            table.add_row("Mounts", "\n".join(f"{p.local_path} -> /{p.name}" for p in points) or "-")
        self.console.print(table)
        self.logger.info(
            f"engine.{operation}",
            sources=list(self.options.sources),
            mounts=len(self.options.mounts.points) if self.options.mounts else 0,
        )

    def init(self) -> None:
        self._report("init")

    def pull(self) -> None:
        self._report("pull")

    def push(self) -> None:
        self._report("push")

    def diff(self) -> None:
        self._report("diff")

    def publish(self) -> None:
        self._report("pub")


# Singleton registry used by the CLI unless one is injected.
default_registry = EngineRegistry()
default_registry.register("report", ReportingEngine)
