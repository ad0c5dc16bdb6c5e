# This file is part of spindle. See LICENSE file for copyright and license info.

import os

from spindle import config
from spindle.log import LOG, OperationLogger, logged_time
from spindle.storage import StorageStage

from . import populate_one_subcmd

CMD_ARGUMENTS = (
    (('-t', '--target'),
     {'help': ('root of the system being provisioned. '
               'default is env[TARGET_MOUNT_POINT] or /'),
      'action': 'store', 'metavar': 'TARGET',
      'default': os.environ.get('TARGET_MOUNT_POINT')}),
    ('--timeout',
     {'help': 'seconds to wait for each set of devices to appear',
      'action': 'store', 'type': float, 'metavar': 'SECONDS',
      'default': None}),
)


@logged_time("STORAGE")
def storage_main(args):
    cfg = args.config
    sourcefile = getattr(args, 'config_source', None)
    storage_cfg = config.load_storage_config(cfg, sourcefile=sourcefile)

    LOG.info('storage: target=%s disks=%d raids=%d filesystems=%d '
             'systemd units=%d networkd units=%d', args.target or '/',
             len(storage_cfg.storage.disks), len(storage_cfg.storage.raid),
             len(storage_cfg.storage.filesystems),
             len(storage_cfg.systemd.units), len(storage_cfg.networkd.units))

    stack_prefix = os.environ.get('SPINDLE_REPORTSTACK', 'storage')
    stage = StorageStage(target=args.target, olog=OperationLogger(),
                         device_timeout=args.timeout,
                         stack_prefix=stack_prefix)
    result = stage.run(storage_cfg)
    if not result.success:
        LOG.error('storage stage failed in phase %s: %s',
                  result.failed_phase.value, result.error)
        return 1
    return 0


def POPULATE_SUBCMD(parser):
    populate_one_subcmd(parser, CMD_ARGUMENTS, storage_main)

# vi: ts=4 expandtab syntax=python
