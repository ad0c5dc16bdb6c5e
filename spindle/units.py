# This file is part of spindle. See LICENSE file for copyright and license info.

"""Write systemd and networkd units into the target root.

Every path here is absolute within the system being provisioned and is
resolved against the target root with paths.target_path.
"""

import os

from spindle import futil, util
from spindle.config import File
from spindle.errors import FileWriteError
from spindle.paths import target_path

SYSTEMD_UNITS_PATH = "/etc/systemd/system"
NETWORKD_UNITS_PATH = "/etc/systemd/network"
PRESET_PATH = "/etc/systemd/system-preset/20-spindle.preset"
NULL_DEVICE = "/dev/null"

DEFAULT_FILE_PERMISSIONS = 0o644
DEFAULT_PRESET_PERMISSIONS = 0o644


def systemd_dropins_path(unit_name):
    return os.path.join(SYSTEMD_UNITS_PATH, unit_name + ".d")


def file_from_systemd_unit(unit):
    return File(path=os.path.join(SYSTEMD_UNITS_PATH, unit.name),
                contents=unit.contents, mode=DEFAULT_FILE_PERMISSIONS,
                uid=0, gid=0)


def file_from_networkd_unit(unit):
    return File(path=os.path.join(NETWORKD_UNITS_PATH, unit.name),
                contents=unit.contents, mode=DEFAULT_FILE_PERMISSIONS,
                uid=0, gid=0)


def file_from_unit_dropin(unit, dropin):
    return File(path=os.path.join(systemd_dropins_path(unit.name),
                                  dropin.name),
                contents=dropin.contents, mode=DEFAULT_FILE_PERMISSIONS,
                uid=0, gid=0)


def write_file(target, finfo):
    """Write a config.File below target, returning the full path."""
    path = target_path(target, finfo.path)
    futil.write_finfo(path, finfo.contents, mode=finfo.mode,
                      uid=finfo.uid, gid=finfo.gid)
    return path


def enable_unit(target, unit):
    """Append an enable directive for unit to the spindle preset file."""
    path = target_path(target, PRESET_PATH)
    try:
        util.ensure_dir(os.path.dirname(path))
        fd = os.open(path, os.O_RDWR | os.O_APPEND | os.O_CREAT,
                     DEFAULT_PRESET_PERMISSIONS)
        with os.fdopen(fd, "a") as fp:
            fp.write("enable %s\n" % unit.name)
    except OSError as e:
        raise FileWriteError(path, e) from e
    return path


def mask_unit(target, unit):
    """Link the unit path to /dev/null.

    A unit file written earlier in the same run (or a mask left by a
    previous run) is replaced by the link.
    """
    path = target_path(target, os.path.join(SYSTEMD_UNITS_PATH, unit.name))
    try:
        util.ensure_dir(os.path.dirname(path))
        if os.path.lexists(path):
            util.del_file(path)
        os.symlink(NULL_DEVICE, path)
    except OSError as e:
        raise FileWriteError(path, e) from e
    return path

# vi: ts=4 expandtab syntax=python
