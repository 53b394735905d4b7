import os

import pytest

from timerd import fileutils


def test_exist_checks(tmp_path):
    target = tmp_path / "data.txt"
    target.write_bytes(b"x")
    assert fileutils.is_exist_dir(str(tmp_path))
    assert not fileutils.is_exist_dir(str(target))
    assert fileutils.is_exist_file(str(target))
    assert not fileutils.is_exist_file(str(tmp_path))
    assert not fileutils.is_exist_file(str(tmp_path / "missing"))
    assert not fileutils.is_exist_dir(None)
    assert not fileutils.is_exist_file(None)


def test_mk_recursive_dir_creates_all_levels(tmp_path):
    target = str(tmp_path) + "/a/b/c"
    fileutils.mk_recursive_dir(target, True)
    assert fileutils.is_exist_dir(target)
    assert fileutils.is_exist_dir(str(tmp_path) + "/a/b")


def test_mk_recursive_dir_existing_is_fine(tmp_path):
    fileutils.mk_recursive_dir(str(tmp_path), False)
    assert fileutils.is_exist_dir(str(tmp_path))


def test_mk_recursive_dir_rejects_empty():
    with pytest.raises(ValueError):
        fileutils.mk_recursive_dir("", False)


def test_mk_recursive_dir_fails_under_a_file(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_bytes(b"x")
    with pytest.raises(OSError):
        fileutils.mk_recursive_dir(str(blocker) + "/sub", False)


def test_write_file_round_trip(tmp_path):
    target = str(tmp_path / "out.bin")
    fileutils.write_file(target, b"hello")
    with open(target, "rb") as fh:
        assert fh.read() == b"hello"
    fileutils.write_file(target, "hi")
    with open(target, "rb") as fh:
        assert fh.read() == b"hi"


def test_write_file_rejects_empty(tmp_path):
    with pytest.raises(ValueError):
        fileutils.write_file(str(tmp_path / "out.bin"), b"")


def test_remove_file_tree(tmp_path):
    root = tmp_path / "tree"
    (root / "inner").mkdir(parents=True)
    (root / "inner" / "f.txt").write_bytes(b"x")
    (root / "g.txt").write_bytes(b"y")
    fileutils.remove_file(str(root))
    assert not root.exists()


def test_remove_missing_is_noop(tmp_path):
    missing = tmp_path / "nothing"
    fileutils.remove_file(str(missing))
    assert not missing.exists()


def test_rename_file_replaces_target(tmp_path):
    old = tmp_path / "old.txt"
    new = tmp_path / "new.txt"
    old.write_bytes(b"old")
    new.write_bytes(b"new")
    fileutils.rename_file(str(old), str(new))
    assert not old.exists()
    assert new.read_bytes() == b"old"


def test_chown_file_to_current_owner(tmp_path):
    target = tmp_path / "owned.txt"
    target.write_bytes(b"x")
    info = os.stat(target)
    fileutils.chown_file(str(target), info.st_uid, info.st_gid)
    assert os.stat(target).st_uid == info.st_uid


def test_chown_missing_raises(tmp_path):
    with pytest.raises(OSError):
        fileutils.chown_file(str(tmp_path / "missing"), os.getuid(), os.getgid())


@pytest.mark.parametrize(
    "root, path, expected",
    [
        ("/data/", "/data/file", True),
        ("/data/", "/other/file", False),
        ("data/", "data/file", False),
        ("/data", "/data/file", False),
        ("/da../", "/da../file", False),
        ("/data/", "/data/../etc", False),
        ("", "/data", False),
    ],
)
def test_is_valid_path(root, path, expected):
    assert fileutils.is_valid_path(root, path) is expected


def test_get_path_dir():
    assert fileutils.get_path_dir("/data/service/file.json") == "/data/service/"
    assert fileutils.get_path_dir("file.json") == ""
    assert fileutils.get_path_dir("/") == "/"