"""Persisted context configuration: creation and upward discovery."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .auth import AuthError, Authenticator
from .errors import ConfigError, ContextNotFound, InitializationError, PathResolutionError

CONTEXT_DIR_NAME = ".gd"
CONFIG_FILE_NAME = "config.yml"


@dataclass(frozen=True)
class ContextPaths:
    """Filesystem locations owned by a single context."""

    root: Path
    context_dir: Path
    config_file: Path

    @classmethod
    def from_root(cls, root: Path) -> "ContextPaths":
        root = Path(os.path.abspath(Path(root).expanduser()))
        context_dir = root / CONTEXT_DIR_NAME
        return cls(root=root, context_dir=context_dir, config_file=context_dir / CONFIG_FILE_NAME)


class CredentialSettings(BaseModel):
    """OAuth client and the refresh token obtained during ``init``."""

    client_id: str
    client_secret: str
    refresh_token: str

    model_config = ConfigDict(extra="forbid", frozen=True)


LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class RuntimeSettings(BaseModel):
    """Runtime-level defaults."""

    log_level: str = Field(default="INFO")
    engine: str = Field(default="report")

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level


class ContextConfig(BaseModel):
    """Top-level model of ``.gd/config.yml``."""

    credentials: CredentialSettings
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)

    model_config = ConfigDict(extra="forbid", frozen=True)


@dataclass(frozen=True)
class Context:
    """A discovered sync root and its persisted configuration."""

    abs_path: str
    config: ContextConfig

    @property
    def paths(self) -> ContextPaths:
        return ContextPaths.from_root(Path(self.abs_path))

    def absolute(self, relative_path: str) -> str:
        """Return the absolute local path of a root-relative path."""

        if not relative_path:
            return self.abs_path
        return os.path.normpath(os.path.join(self.abs_path, relative_path))

    def relative(self, path: str) -> str:
        """Return ``path`` relative to the root; ``""`` for the root itself."""

        try:
            rel = os.path.relpath(os.path.abspath(path), self.abs_path)
        except ValueError as exc:
            raise PathResolutionError(f"Cannot resolve {path} relative to {self.abs_path}") from exc
        if rel == os.curdir:
            return ""
        if rel == os.pardir or rel.startswith(os.pardir + os.sep):
            raise PathResolutionError(f"{path} is outside of the context at {self.abs_path}")
        return rel


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML file: {path}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Expected mapping at top level of {path}")
    return data


def _write_yaml(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False)


def load_context_config(path: Path) -> ContextConfig:
    """Load and validate a context configuration file."""

    payload = _read_yaml(path)
    try:
        return ContextConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid context configuration: {path}") from exc


def save_context_config(path: Path, config: ContextConfig) -> None:
    _write_yaml(path, config.model_dump(mode="json"))


def initialize(path: str, authenticator: Authenticator) -> Context:
    """Create a new context rooted at ``path``.

    The authenticator runs before anything is written, so a failed handshake
    leaves the directory untouched.
    """

    paths = ContextPaths.from_root(Path(path))
    if paths.config_file.exists():
        raise InitializationError(f"Context already initialised at {paths.root}")
    if paths.root.exists() and not paths.root.is_dir():
        raise InitializationError(f"{paths.root} is not a directory")

    try:
        credentials = authenticator.authenticate()
    except AuthError as exc:
        raise InitializationError(f"Authentication failed: {exc}") from exc

    config = ContextConfig(
        credentials=CredentialSettings(
            client_id=credentials.client_id,
            client_secret=credentials.client_secret,
            refresh_token=credentials.refresh_token,
        )
    )
    try:
        save_context_config(paths.config_file, config)
    except OSError as exc:
        raise InitializationError(f"Cannot write {paths.config_file}: {exc}") from exc
    return Context(abs_path=str(paths.root), config=config)


def find_root(path: str) -> Optional[Path]:
    """Walk upward from ``path`` and return the first directory holding a context."""

    current = Path(os.path.abspath(Path(path).expanduser()))
    for candidate in (current, *current.parents):
        if ContextPaths.from_root(candidate).config_file.is_file():
            return candidate
    return None


def discover(path: str) -> Context:
    """Load the context that contains ``path``."""

    root = find_root(path)
    if root is None:
        raise ContextNotFound(f"No context found at or above {os.path.abspath(path)}; run 'gd init' first.")
    paths = ContextPaths.from_root(root)
    return Context(abs_path=str(paths.root), config=load_context_config(paths.config_file))
