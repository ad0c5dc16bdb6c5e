# This file is part of spindle. See LICENSE file for copyright and license info.

import os

from .errors import FileWriteError
from .util import del_file, write_file


def chownbyid(fname, uid=None, gid=None):
    if uid in [None, -1] and gid in [None, -1]:
        return
    if uid is None:
        uid = -1
    if gid is None:
        gid = -1
    os.chown(fname, uid, gid)


def decode_perms(perm, default=0o644):
    try:
        if perm is None:
            return default
        if isinstance(perm, (int, float)):
            # Just 'downcast' it (if a float)
            return int(perm)
        else:
            # Force to string and try octal conversion
            return int(str(perm), 8)
    except (TypeError, ValueError):
        return default


def write_finfo(path, content, mode=0o644, uid=None, gid=None):
    """Write content to path, creating parent directories as needed.

    The file is chmod'ed to mode and chown'ed to uid/gid (None or -1 leave
    the owner unchanged).  A symlink already at path is replaced rather
    than followed.  OSError is re-raised as FileWriteError naming the path.
    """
    omode = "w"
    if isinstance(content, bytes):
        omode = "wb"
    try:
        if os.path.islink(path):
            del_file(path)
        # an explicit 0 mode must still be applied, write_file skips falsy
        write_file(path, content, mode=None, omode=omode)
        os.chmod(path, mode)
        chownbyid(path, uid, gid)
    except OSError as e:
        raise FileWriteError(path, e) from e

# vi: ts=4 expandtab syntax=python
