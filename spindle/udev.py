# This file is part of spindle. See LICENSE file for copyright and license info.

import os
import time

from spindle import util
from spindle.errors import DeviceTimeout
from spindle.log import LOG, logged_call

# seconds handed to each 'udevadm settle' while waiting on a device
SETTLE_INTERVAL = 5
# seconds to sleep between polls when udevadm itself is unusable
POLL_INTERVAL = 0.5


@logged_call()
def udevadm_settle(exists=None, timeout=None):
    settle_cmd = ["udevadm", "settle"]
    if exists:
        # skip the settle if the requested path already exists
        if os.path.exists(exists):
            return
        settle_cmd.extend(['--exit-if-exists=%s' % exists])
    if timeout:
        settle_cmd.extend(['--timeout=%s' % timeout])

    util.subp(settle_cmd)


def _missing(devices):
    return [dev for dev in devices if not os.path.exists(dev)]


def wait_for_devices(devices, context, timeout):
    """Block until every path in devices exists or timeout seconds pass.

    Duplicate paths are waited on once.  Raises DeviceTimeout naming
    context and the devices still missing when the bound is reached.
    """
    devices = list(dict.fromkeys(devices))
    pending = _missing(devices)
    if not pending:
        return

    LOG.debug('waiting up to %ss for %s devices: %s', timeout, context,
              pending)
    deadline = time.monotonic() + timeout
    while pending:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise DeviceTimeout(context, pending, timeout)
        settle = max(1, int(min(remaining, SETTLE_INTERVAL)))
        try:
            udevadm_settle(exists=pending[0], timeout=settle)
        except util.ProcessExecutionError as e:
            LOG.debug('udevadm settle failed, polling instead: %s', e)
        pending = _missing(pending)
        if pending:
            # settle returns as soon as the event queue drains
            time.sleep(min(POLL_INTERVAL, max(0, remaining)))

    LOG.debug('all %s devices present: %s', context, devices)

# vi: ts=4 expandtab syntax=python
