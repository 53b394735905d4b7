"""Small filesystem helpers used by the time service."""

from __future__ import annotations

import errno
import os
import stat
from typing import Optional, Union

PATH_SEPARATOR = "/"
PATH_MAX = 4096

_PathArg = Optional[Union[str, os.PathLike]]


def is_exist_dir(path: _PathArg) -> bool:
    """Whether ``path`` names an existing directory."""
    if path is None:
        return False
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except (OSError, ValueError):
        return False


def is_exist_file(path: _PathArg) -> bool:
    """Whether ``path`` names an existing regular file."""
    if path is None:
        return False
    try:
        return stat.S_ISREG(os.stat(path).st_mode)
    except (OSError, ValueError):
        return False


def mk_recursive_dir(path: str, read_others: bool) -> None:
    """Create ``path`` and every missing parent, one level at a time."""
    if path is None:
        raise ValueError("path is required")
    path = os.fspath(path)
    if is_exist_dir(path):
        return
    if not path or len(path) > PATH_MAX:
        raise ValueError(f"invalid directory path length: {len(path)}")
    mode = stat.S_IRWXU | stat.S_IRWXG | stat.S_IXOTH
    if read_others:
        mode |= stat.S_IROTH
    last = len(path) - 1
    for i, ch in enumerate(path):
        if ch != PATH_SEPARATOR and i != last:
            continue
        prefix = path[: i + 1]
        if not is_exist_dir(prefix):
            os.mkdir(prefix, mode)


def remove_file(path: str) -> None:
    """Remove a file or a whole directory tree; a missing path is not an error."""
    path = os.fspath(path)
    if is_exist_file(path):
        os.remove(path)
    elif is_exist_dir(path):
        if os.path.islink(path):
            os.unlink(path)
            return
        with os.scandir(path) as entries:
            children = [entry.name for entry in entries]
        for name in children:
            child = path + PATH_SEPARATOR + name
            if len(child) >= PATH_MAX:
                raise OSError(errno.ENAMETOOLONG, os.strerror(errno.ENAMETOOLONG), child)
            remove_file(child)
        os.rmdir(path)


def rename_file(old_path: str, new_path: str) -> None:
    """Move ``old_path`` to ``new_path``, removing whatever was there first."""
    if old_path is None or new_path is None:
        raise ValueError("both paths are required")
    remove_file(new_path)
    os.rename(old_path, new_path)


def chown_file(path: str, uid: int, gid: int) -> None:
    """Change the owner and group of ``path``."""
    if path is None:
        raise ValueError("path is required")
    os.chown(path, uid, gid)


def write_file(path: str, data: Union[bytes, str]) -> None:
    """Create or truncate ``path`` and write ``data`` to it completely."""
    if path is None or data is None:
        raise ValueError("path and data are required")
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data:
        raise ValueError("nothing to write")
    mode = stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IROTH
    fd = os.open(path, os.O_RDWR | os.O_CREAT | os.O_TRUNC, mode)
    try:
        written = os.write(fd, data)
    finally:
        os.close(fd)
    if written != len(data):
        raise OSError(errno.EIO, f"short write: {written} of {len(data)} bytes", path)


def is_valid_path(root_dir: str, path: str) -> bool:
    """Whether ``path`` lies under the absolute, slash-terminated ``root_dir``."""
    if not root_dir.startswith(PATH_SEPARATOR) or not root_dir.endswith(PATH_SEPARATOR):
        return False
    if ".." in root_dir or ".." in path:
        return False
    return path.startswith(root_dir)


def get_path_dir(path: str) -> str:
    """The directory part of ``path`` including its trailing slash, or ''."""
    pos = path.rfind(PATH_SEPARATOR)
    if pos < 0:
        return ""
    return path[: pos + 1]