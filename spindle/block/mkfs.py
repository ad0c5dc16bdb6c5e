# This file is part of spindle. See LICENSE file for copyright and license info.

# This module wraps calls to mkfs.<fstype> and determines the appropriate
# non-interactive overwrite flag for each supported filesystem.

import attr

from spindle import util
from spindle.errors import ExternalToolError, UnsupportedFormat
from spindle.log import LOG, OperationLogger


@attr.s(auto_attribs=True, frozen=True)
class Formatter:
    fstype: str
    command: str
    # flag making the formatter overwrite an existing filesystem
    force_flag: str

    def args(self, device, options=()):
        return [self.command] + list(options) + [self.force_flag, device]


_formatters = [
    Formatter("btrfs", "mkfs.btrfs", "--force"),
    Formatter("ext4", "mkfs.ext4", "-F"),
    Formatter("xfs", "mkfs.xfs", "-f"),
    Formatter("vfat", "mkfs.vfat", "-I"),
]

FORMATTERS = {f.fstype: f for f in _formatters}


def get_formatter(fstype):
    """Return the Formatter for fstype or raise UnsupportedFormat."""
    try:
        return FORMATTERS[fstype]
    except (KeyError, TypeError):
        raise UnsupportedFormat(fstype) from None


def mkfs(device, fstype, options=None, olog=None):
    """Make a filesystem of fstype on device, overwriting what is there.

    options are passed to the formatter ahead of its force flag and the
    device path.  The formatter is resolved before anything is run, so an
    unsupported fstype never touches the device.
    """
    if olog is None:
        olog = OperationLogger()
    if options is None:
        options = []
    formatter = get_formatter(fstype)
    cmd = formatter.args(device, options)
    LOG.debug('mkfs: device=%s fstype=%s options=%s', device, fstype, options)
    try:
        olog.log_cmd(cmd, "creating %s filesystem on %s", fstype, device)
    except util.ProcessExecutionError as e:
        raise ExternalToolError(cmd, e) from e

# vi: ts=4 expandtab syntax=python
