from pathlib import Path

import pytest

from drivesync.auth import AuthError, Credentials
from drivesync.config import ContextConfig, ContextPaths, CredentialSettings, save_context_config
from drivesync.engine import EngineRegistry


class RecordingEngine:
    """Engine double that remembers every call made through it."""

    calls = []

    def __init__(self, context, options):
        self.context = context
        self.options = options

    def _record(self, operation):
        RecordingEngine.calls.append((operation, self.context, self.options))

    def init(self):
        self._record("init")

    def pull(self):
        self._record("pull")

    def push(self):
        # Mount links must still exist while the engine runs.
        if self.options.mounts:
            assert all(Path(p.mount_path).exists() for p in self.options.mounts.points)
        self._record("push")

    def diff(self):
        self._record("diff")

    def publish(self):
        self._record("publish")


class FailingEngine(RecordingEngine):
    def push(self):
        raise RuntimeError("remote rejected the upload")


class StaticAuthenticator:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = 0

    def authenticate(self):
        self.calls += 1
        if self.fail:
            raise AuthError("access denied")
        return Credentials(client_id="client", client_secret="secret", refresh_token="refresh")


def write_context(root, engine="recording", log_level="INFO"):
    paths = ContextPaths.from_root(root)
    config = ContextConfig.model_validate(
        {
            "credentials": {"client_id": "client", "client_secret": "secret", "refresh_token": "refresh"},
            "runtime": {"engine": engine, "log_level": log_level},
        }
    )
    save_context_config(paths.config_file, config)
    return paths


@pytest.fixture
def engines():
    RecordingEngine.calls = []
    registry = EngineRegistry()
    registry.register("recording", RecordingEngine)
    registry.register("failing", FailingEngine)
    return registry


@pytest.fixture
def sync_root(tmp_path):
    root = tmp_path / "drive"
    root.mkdir()
    write_context(root)
    return root


@pytest.fixture
def credentials():
    return CredentialSettings(client_id="client", client_secret="secret", refresh_token="refresh")
