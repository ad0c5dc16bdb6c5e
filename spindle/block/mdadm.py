# This file is part of spindle. See LICENSE file for copyright and license info.

# This module wraps calls to the mdadm utility for creating Linux SoftRAID
# virtual devices.

import os

from spindle import util
from spindle.errors import ExternalToolError
from spindle.log import LOG, OperationLogger

MDADM_CMD = "mdadm"


def mdadm_create_args(md_devname, raidlevel, devices, spares=0):
    """Return the mdadm command creating array md_devname.

    The level is passed through untouched; mdadm is the judge of what it
    accepts.  Spares are the trailing 'spares' entries of devices, so the
    active device count is len(devices) - spares.
    """
    cmd = [MDADM_CMD, "--create", md_devname,
           "--force",
           "--run",
           "--level", str(raidlevel),
           "--raid-devices", str(len(devices) - spares)]
    if spares > 0:
        cmd.extend(["--spare-devices", str(spares)])
    cmd.extend(devices)
    return cmd


def _log_md_modules():
    # frequent issues by modules being missing (LP: #1519470) - add debug
    LOG.debug('mdadm_create failed - extra debug regarding md modules')
    try:
        (out, _err) = util.subp(["lsmod"], capture=True)
        LOG.debug('modules loaded: \n%s', out)
        raidmodpath = '/lib/modules/%s/kernel/drivers/md' % os.uname()[2]
        (out, _err) = util.subp(["find", raidmodpath],
                                rcs=[0, 1], capture=True)
    except util.ProcessExecutionError as e:
        LOG.debug('unable to list md modules: %s', e)
        return
    if out:
        LOG.debug('available md modules: \n%s', out)
    else:
        LOG.debug('no available md modules found')


def mdadm_create(md_devname, raidlevel, devices, spares=0, olog=None):
    # FIXME: md superblocks left on a member by a previous array are not
    # erased first, and mdadm's automatic assembly of such metadata can make
    # this create behave unexpectedly.
    if olog is None:
        olog = OperationLogger()
    LOG.debug('mdadm_create: md_name=%s raidlevel=%s devices=%s spares=%s',
              md_devname, raidlevel, devices, spares)

    cmd = mdadm_create_args(md_devname, raidlevel, devices, spares=spares)
    try:
        olog.log_cmd(cmd, "creating %s", md_devname)
    except util.ProcessExecutionError as e:
        _log_md_modules()
        raise ExternalToolError(cmd, e) from e

# vi: ts=4 expandtab syntax=python
