"""Command-line entry point for ``gd``."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import click
import typer

from .app_context import discover_context, initialize_context
from .auth import Authenticator, GoogleAuthenticator
from .config import Context
from .engine import EngineFactory, EngineRegistry, Options, default_registry
from .errors import ConfigError, DriveError, UnknownCommand
from .flags import BoolFlag, normalize_invocation
from .logging import configure_logging, get_logger
from .sources import build_push_sources, split_push_args

app = typer.Typer(help="gd: keep a local directory in sync with Google Drive.")

DESC_INIT = "inits a directory and authenticates user"
DESC_PULL = "pulls remote changes from google drive"
DESC_PUSH = "push local changes to google drive"
DESC_DIFF = "compares a local file with remote"
DESC_PUBLISH = "publishes a file and prints its publicly available url"

_GLOBAL_VALUE_OPTIONS = {"--log-file"}


def _bootstrap_logging(
    ctx: typer.Context,
    verbose: bool,
    json_logs: bool,
    log_file: Optional[Path],
) -> None:
    """Initialise logging once per CLI invocation."""

    if ctx.obj is None:
        ctx.obj = {}

    if ctx.obj.get("_logging_configured"):
        return

    level = "DEBUG" if verbose else "INFO"
    configure_logging(level=level, json_output=json_logs, log_file=log_file)
    ctx.obj["logger"] = get_logger("drivesync.cli")
    ctx.obj["log_level"] = level
    ctx.obj["json_logs"] = json_logs
    ctx.obj["log_file_path"] = log_file
    ctx.obj["force_log_level"] = verbose
    ctx.obj["_logging_configured"] = True


@app.callback(invoke_without_command=True)
def cli(  # noqa: D401 - Typer generates help text.
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON-formatted logs."),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        dir_okay=False,
        file_okay=True,
        writable=True,
        resolve_path=True,
        help="Optional file to append structured logs to.",
    ),
) -> None:
    """gd command group."""

    _bootstrap_logging(ctx, verbose, json_logs, log_file)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _logger(ctx: typer.Context):
    return ctx.obj.get("logger", get_logger("drivesync.cli"))


def _maybe_update_log_level(ctx: typer.Context, context: Context) -> None:
    if ctx.obj.get("force_log_level"):
        return

    desired = context.config.runtime.log_level.upper()
    if desired != ctx.obj.get("log_level"):
        configure_logging(
            level=desired,
            json_output=ctx.obj.get("json_logs", False),
            log_file=ctx.obj.get("log_file_path"),
        )
        ctx.obj["logger"] = get_logger("drivesync.cli")
        ctx.obj["log_level"] = desired


def _engine_factory(ctx: typer.Context, context: Context) -> EngineFactory:
    registry: EngineRegistry = ctx.obj.get("engines", default_registry)
    try:
        return registry.get(context.config.runtime.engine)
    except KeyError as exc:
        raise ConfigError(f"Unknown engine '{context.config.runtime.engine}' in {context.paths.config_file}") from exc


def _authenticator(ctx: typer.Context) -> Authenticator:
    return ctx.obj.get("authenticator") or GoogleAuthenticator()


def _fail(ctx: typer.Context, event: str, exc: DriveError) -> typer.Exit:
    _logger(ctx).error(event, error=str(exc), error_type=type(exc).__name__)
    typer.echo(str(exc))
    return typer.Exit(code=1)


def _discover(ctx: typer.Context, command: str, args: Sequence[str]) -> Tuple[Context, str, EngineFactory]:
    try:
        context, path = discover_context(args)
        factory = _engine_factory(ctx, context)
    except DriveError as exc:
        raise _fail(ctx, f"{command}.failed", exc) from exc

    _maybe_update_log_level(ctx, context)
    _logger(ctx).debug(f"{command}.context_resolved", root=context.abs_path, path=path)
    return context, path, factory


def init_command(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Directory to initialise (defaults to the working directory)."),
) -> None:
    log = _logger(ctx)

    try:
        context = initialize_context([path] if path else [], _authenticator(ctx))
        factory = _engine_factory(ctx, context)
    except DriveError as exc:
        raise _fail(ctx, "init.failed", exc) from exc

    typer.echo(f"Initialised {context.abs_path}")
    log.info("init.completed", root=context.abs_path, config_file=str(context.paths.config_file))
    factory(context, Options()).init()


def pull_command(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Path to pull (defaults to the working directory)."),
    recursive: bool = typer.Option(
        True, "-r", "--recursive/--no-recursive", help="performs the pull action recursively"
    ),
    no_prompt: bool = typer.Option(False, "--no-prompt", help="shows no prompt before applying the pull action"),
) -> None:
    context, rel_path, factory = _discover(ctx, "pull", [path] if path else [])
    factory(
        context,
        Options(path=rel_path, is_recursive=recursive, is_no_prompt=no_prompt),
    ).pull()


def push_command(
    ctx: typer.Context,
    paths: Optional[List[str]] = typer.Argument(
        None, help="Paths to push; with -m, mount names followed by the mount directory."
    ),
    hidden: bool = typer.Option(False, "--hidden", help="allows syncing of hidden paths"),
    recursive: bool = typer.Option(
        True, "-r", "--recursive/--no-recursive", help="performs the push action recursively"
    ),
    no_prompt: bool = typer.Option(False, "--no-prompt", help="shows no prompt before applying the push action"),
    mounted: bool = typer.Option(False, "-m", "--mounted", help="allows pushing of mounted paths"),
) -> None:
    log = _logger(ctx)
    push_args = split_push_args(paths or [], mounted)
    context, rel_path, factory = _discover(ctx, "push", push_args.context_args)

    try:
        mount, sources = build_push_sources(context, rel_path, push_args, hidden)
    except DriveError as exc:
        raise _fail(ctx, "push.failed", exc) from exc

    log.info(
        "push.sources_resolved",
        path=rel_path,
        mounted=push_args.mounted,
        sources=sources,
        mounts=len(mount.points) if mount else 0,
    )

    options = Options(
        path=rel_path,
        hidden=hidden,
        is_no_prompt=no_prompt,
        is_recursive=recursive,
        mounts=mount,
        sources=tuple(sources),
    )
    try:
        factory(context, options).push()
    finally:
        if mount is not None:
            mount.cleanup()


def diff_command(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Path to compare (defaults to the working directory)."),
) -> None:
    context, rel_path, factory = _discover(ctx, "diff", [path] if path else [])
    factory(context, Options(path=rel_path)).diff()


def publish_command(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Path to publish (defaults to the working directory)."),
) -> None:
    context, rel_path, factory = _discover(ctx, "pub", [path] if path else [])
    factory(context, Options(path=rel_path)).publish()


_RECURSIVE = BoolFlag("r", True, "-r", "--no-recursive")
_NO_PROMPT = BoolFlag("no-prompt", False, "--no-prompt")
_HIDDEN = BoolFlag("hidden", False, "--hidden")
_MOUNTED = BoolFlag("m", False, "-m")


@dataclass(frozen=True)
class CommandSpec:
    """One entry of the command table."""

    name: str
    description: str
    flags: Tuple[BoolFlag, ...]
    run: Callable[..., None]


COMMANDS: Dict[str, CommandSpec] = {
    spec.name: spec
    for spec in (
        CommandSpec("init", DESC_INIT, (), init_command),
        CommandSpec("pull", DESC_PULL, (_RECURSIVE, _NO_PROMPT), pull_command),
        CommandSpec("push", DESC_PUSH, (_HIDDEN, _RECURSIVE, _NO_PROMPT, _MOUNTED), push_command),
        CommandSpec("diff", DESC_DIFF, (), diff_command),
        CommandSpec("pub", DESC_PUBLISH, (), publish_command),
    )
}

for _spec in COMMANDS.values():
    app.command(_spec.name, help=_spec.description)(_spec.run)


def _command_name(tokens: Sequence[str]) -> Optional[str]:
    """Return the first token naming a command, skipping global options."""

    skip_next = False
    for token in tokens:
        if skip_next:
            skip_next = False
            continue
        if token in _GLOBAL_VALUE_OPTIONS:
            skip_next = True
            continue
        if token.startswith("-"):
            continue
        return token
    return None


def main(argv: Optional[Sequence[str]] = None, obj: Optional[dict] = None) -> int:
    """Run ``gd`` and return the process exit status.

    ``obj`` seeds the typer context object; ``engines`` and ``authenticator``
    keys replace the default engine registry and OAuth flow.
    """

    tokens = list(sys.argv[1:] if argv is None else argv)
    try:
        name = _command_name(tokens)
        if name is not None and name not in COMMANDS:
            raise UnknownCommand(f"unknown command {name!r}; expected one of: {', '.join(COMMANDS)}")
        tokens = normalize_invocation(tokens, {spec.name: spec.flags for spec in COMMANDS.values()})
        code = app(args=tokens, prog_name="gd", standalone_mode=False, obj=obj)
    except click.UsageError as exc:
        typer.echo(exc.format_message())
        return 1
    except click.Abort:
        typer.echo("Aborted!")
        return 1
    except DriveError as exc:
        typer.echo(str(exc))
        return 1
    except Exception as exc:  # errors raised by the engine are reported verbatim
        get_logger("drivesync.cli").debug("command.failed", error=str(exc), exc_info=True)
        typer.echo(str(exc))
        return 1
    return code if isinstance(code, int) else 0


def run() -> None:
    """Console script entry point."""

    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover - direct execution convenience
    run()
