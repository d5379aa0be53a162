import pytest

from drivesync.config import discover
from drivesync.errors import MountResolutionError
from drivesync.sources import build_push_sources, split_push_args


@pytest.mark.parametrize(
    "args",
    [[], ["myfile.txt"], ["docs", "photos/2013", "notes.md"]],
)
def test_plain_push_roots_every_argument(args):
    push_args = split_push_args(args, mounted_push=False)

    assert push_args.sources == tuple("/" + a for a in args)
    assert push_args.context_args == tuple(args)
    assert push_args.rest == ()
    assert push_args.mounted is False


def test_mounted_push_uses_last_argument_as_context():
    push_args = split_push_args(["mount1", "mount2", "/sync/root"], mounted_push=True)

    assert push_args.context_args == ("/sync/root",)
    assert push_args.rest == ("mount1", "mount2")
    assert push_args.sources == ()
    assert push_args.mounted is True


def test_mounted_push_single_argument_has_no_mount_names():
    push_args = split_push_args(["/sync/root"], mounted_push=True)

    assert push_args.context_args == ("/sync/root",)
    assert push_args.rest == ()
    assert push_args.sources == ()


def test_mounted_push_without_arguments_behaves_like_plain_push():
    assert split_push_args([], mounted_push=True) == split_push_args([], mounted_push=False)


def test_plain_push_sources_skip_mount_resolution(sync_root):
    context = discover(str(sync_root))
    push_args = split_push_args(["myfile.txt"], mounted_push=False)

    mount, sources = build_push_sources(context, "", push_args, hidden=False)

    assert mount is None
    assert sources == ["/myfile.txt"]


def test_mounted_push_sources_come_from_mounts_only(sync_root, tmp_path):
    (tmp_path / "mount1").mkdir()
    (tmp_path / "mount2").mkdir()
    context = discover(str(sync_root))
    push_args = split_push_args(
        [str(tmp_path / "mount1"), str(tmp_path / "mount2"), str(sync_root)],
        mounted_push=True,
    )

    mount, sources = build_push_sources(context, "", push_args, hidden=False)

    try:
        assert sources == ["/mount1", "/mount2"]
        assert [p.local_path for p in mount.points] == [str(tmp_path / "mount1"), str(tmp_path / "mount2")]
    finally:
        mount.cleanup()


def test_mounted_push_into_subdirectory(sync_root, tmp_path):
    (tmp_path / "album").mkdir()
    context = discover(str(sync_root))
    push_args = split_push_args([str(tmp_path / "album"), str(sync_root / "photos")], mounted_push=True)

    mount, sources = build_push_sources(context, "photos", push_args, hidden=False)

    try:
        assert sources == ["/photos/album"]
        assert mount.created_mount_dir == str(sync_root / "photos")
        assert (sync_root / "photos" / "album").is_symlink()
    finally:
        mount.cleanup()
    assert not (sync_root / "photos").exists()


def test_unknown_mount_name_is_an_error(sync_root, tmp_path):
    context = discover(str(sync_root))
    push_args = split_push_args([str(tmp_path / "does-not-exist"), str(sync_root)], mounted_push=True)

    with pytest.raises(MountResolutionError):
        build_push_sources(context, "", push_args, hidden=False)
