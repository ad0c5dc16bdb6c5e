# This file is part of spindle. See LICENSE file for copyright and license info.

# This module queues gpt partitioning operations for a single disk and writes
# them with sgdisk on commit.  sgdisk itself is responsible for the on-disk
# encoding of the table.

from spindle import util
from spindle.errors import CommitError
from spindle.log import OperationLogger

SGDISK_CMD = "sgdisk"


def partition_args(part):
    """Return the sgdisk arguments creating partition 'part'.

    A size of 0 extends the partition to the end of the disk and a start of
    0 places it at the first free sector, which is how sgdisk itself reads
    zero in those positions.
    """
    args = ["--new=%d:%d:+%d" % (part.number, part.start, part.size)]
    if part.label:
        args.append("--change-name=%d:%s" % (part.number, part.label))
    if part.type_guid:
        args.append("--typecode=%d:%s" % (part.number, part.type_guid))
    return args


class Operation(object):
    def __init__(self, device, olog=None):
        if olog is None:
            olog = OperationLogger()
        self.device = device
        self.olog = olog
        self.wipe = False
        self.parts = []

    def wipe_table(self, wipe):
        self.wipe = wipe

    def create_partition(self, part):
        self.parts.append(part)

    def commit(self):
        """Write the queued changes to the disk.

        All queued partitions go to sgdisk in one invocation so the table is
        written once.  Raises CommitError on any sgdisk failure.
        """
        if self.wipe:
            cmd = [SGDISK_CMD, "--zap-all", self.device]
            try:
                self.olog.log_cmd(cmd, "wiping table on %s", self.device)
            except util.ProcessExecutionError as e:
                raise CommitError(self.device, "wipe failed: %s" % e) from e

        if not self.parts:
            return

        cmd = [SGDISK_CMD]
        for part in self.parts:
            cmd.extend(partition_args(part))
        cmd.append(self.device)
        try:
            self.olog.log_cmd(cmd, "creating %d partitions on %s",
                              len(self.parts), self.device)
        except util.ProcessExecutionError as e:
            raise CommitError(self.device, "create partitions failed: %s" %
                              e) from e


def begin(device, olog=None):
    return Operation(device, olog=olog)

# vi: ts=4 expandtab syntax=python
