# This file is part of spindle. See LICENSE file for copyright and license info.

"""The storage stage.

Partitions disks, creates raid arrays, formats filesystems and writes files
into them, then writes systemd and networkd units into the target root.
The phases run strictly in that order and the first failure ends the run;
nothing already done is rolled back.
"""

import enum

import attr

from spindle import config as spindle_config
from spindle import units, util
from spindle.block import mdadm, mkfs, sgdisk
from spindle.errors import StorageError
from spindle.futil import write_finfo
from spindle.log import OperationLogger
from spindle.paths import target_path
from spindle.reporter import events
from spindle.udev import wait_for_devices


class Phase(enum.Enum):
    PARTITIONS = "partitions"
    RAIDS = "raids"
    FILESYSTEMS = "filesystems"
    UNITS = "units"


PHASE_ORDER = (Phase.PARTITIONS, Phase.RAIDS, Phase.FILESYSTEMS, Phase.UNITS)

_phase_failure_msgs = {
    Phase.PARTITIONS: "create partitions failed",
    Phase.RAIDS: "failed to create raids",
    Phase.FILESYSTEMS: "failed to create filesystems",
    Phase.UNITS: "failed to create units",
}


@attr.s(auto_attribs=True, frozen=True)
class StageResult:
    completed: tuple = ()
    failed_phase: Phase = None
    error: Exception = None

    @property
    def success(self):
        return self.failed_phase is None


class StorageStage(object):
    name = "storage"

    def __init__(self, target=None, olog=None, device_timeout=None,
                 stack_prefix=None):
        if olog is None:
            olog = OperationLogger()
        self.target = target_path(target)
        self.olog = olog
        self.device_timeout = device_timeout
        if stack_prefix is None:
            stack_prefix = self.name
        self.stack_prefix = stack_prefix
        self._handlers = {
            Phase.PARTITIONS: self.create_partitions,
            Phase.RAIDS: self.create_raids,
            Phase.FILESYSTEMS: self.create_filesystems,
            Phase.UNITS: self.create_units,
        }

    def _timeout(self, cfg):
        if self.device_timeout is not None:
            return self.device_timeout
        return cfg.storage.device_timeout

    def run(self, cfg):
        """Run every phase against cfg and return a StageResult.

        A phase that raises StorageError stops the run; the error is logged
        at critical level and carried in the result with the phase that
        failed.
        """
        result = StageResult()
        for phase in PHASE_ORDER:
            result = self._run_phase(phase, cfg, result)
            if not result.success:
                break
        return result

    def _run_phase(self, phase, cfg, result):
        try:
            with events.ReportEventStack(
                    name=self.stack_prefix + '/' + phase.value,
                    reporting_enabled=True, level="INFO",
                    description="%s: %s" % (self.name, phase.value)):
                self._handlers[phase](cfg)
        except StorageError as e:
            self.olog.crit("%s: %s", _phase_failure_msgs[phase], e)
            return attr.evolve(result, failed_phase=phase, error=e)
        return attr.evolve(result, completed=result.completed + (phase,))

    def wait_on_devices(self, devices, context, timeout):
        """Wait for devices as a logged operation."""
        try:
            self.olog.log_op(
                lambda: wait_for_devices(devices, context, timeout),
                "waiting for devices %s", devices)
        except StorageError as e:
            self.olog.crit("failed to wait on %s devs: %s", context, e)
            raise

    def create_partitions(self, cfg):
        """Create the partitions described in cfg.storage.disks."""
        disks = [d for d in cfg.storage.disks if not d.is_noop()]
        if not disks:
            return
        with self.olog.prefix("createPartitions"):
            self.wait_on_devices([d.device for d in disks], "disks",
                                 self._timeout(cfg))
            for disk in disks:
                self.olog.log_op(lambda: self._partition_disk(disk),
                                 "partitioning %s", disk.device)

    def _partition_disk(self, disk):
        op = sgdisk.begin(disk.device, olog=self.olog)
        if disk.wipe_table:
            self.olog.notice("wiping partition table requested on %s",
                             disk.device)
        op.wipe_table(disk.wipe_table)
        for part in disk.partitions:
            op.create_partition(part)
        op.commit()

    def create_raids(self, cfg):
        """Create the raid arrays described in cfg.storage.raid."""
        arrays = cfg.storage.raid
        if not arrays:
            return
        with self.olog.prefix("createRaids"):
            devs = [dev for md in arrays for dev in md.devices]
            self.wait_on_devices(devs, "raids", self._timeout(cfg))
            for md in arrays:
                mdadm.mdadm_create(md.name, md.level, md.devices,
                                   spares=md.spares, olog=self.olog)

    def create_filesystems(self, cfg):
        """Create the filesystems described in cfg.storage.filesystems."""
        filesystems = cfg.storage.filesystems
        if not filesystems:
            return
        with self.olog.prefix("createFilesystems"):
            self.wait_on_devices([fs.device for fs in filesystems],
                                 "filesystems", self._timeout(cfg))
            for fs in filesystems:
                if fs.initialize:
                    mkfs.mkfs(fs.device, fs.format, options=fs.options,
                              olog=self.olog)
                else:
                    self.olog.info("reusing existing filesystem on %s",
                                   fs.device)
                try:
                    self.create_files(fs)
                except StorageError:
                    self.olog.crit("failed to create files on %s",
                                   fs.device)
                    raise

    def create_files(self, fs):
        """Write fs.files into the filesystem through a scoped mount."""
        if not fs.files:
            return
        with self.olog.prefix("createFiles"):
            with util.scoped_mount(fs.device, fs.format,
                                   olog=self.olog) as mnt:
                for f in fs.files:
                    path = target_path(mnt, f.path)
                    self.olog.log_op(
                        lambda: write_finfo(path, f.contents, mode=f.mode,
                                            uid=f.uid, gid=f.gid),
                        "writing file %s", f.path)

    def create_units(self, cfg):
        """Create the units in cfg.systemd.units and cfg.networkd.units."""
        if not cfg.systemd.units and not cfg.networkd.units:
            return
        with self.olog.prefix("createUnits"):
            for unit in cfg.systemd.units:
                self.write_systemd_unit(unit)
                if unit.enable:
                    self.olog.log_op(
                        lambda: units.enable_unit(self.target, unit),
                        "enabling unit %s", unit.name)
                if unit.mask:
                    self.olog.log_op(
                        lambda: units.mask_unit(self.target, unit),
                        "masking unit %s", unit.name)
            for unit in cfg.networkd.units:
                self.write_networkd_unit(unit)

    def _write_unit_file(self, finfo, what, name):
        path = target_path(self.target, finfo.path)
        self.olog.log_op(lambda: units.write_file(self.target, finfo),
                         "writing %s %s at %s", what, name, path)

    def write_systemd_unit(self, unit):
        """Write unit and its dropins.

        Empty contents mean the unit file is not written, the same goes for
        each dropin.
        """
        def _write():
            for dropin in unit.dropins:
                if not dropin.contents:
                    continue
                self._write_unit_file(
                    units.file_from_unit_dropin(unit, dropin),
                    "dropin", dropin.name)
            if not unit.contents:
                return
            self._write_unit_file(units.file_from_systemd_unit(unit),
                                  "unit", unit.name)

        self.olog.log_op(_write, "writing unit %s", unit.name)

    def write_networkd_unit(self, unit):
        """Write unit unless its contents are empty."""
        def _write():
            if not unit.contents:
                return
            self._write_unit_file(units.file_from_networkd_unit(unit),
                                  "unit", unit.name)

        self.olog.log_op(_write, "writing unit %s", unit.name)


def run_storage(cfg, target=None, olog=None, device_timeout=None,
                stack_prefix=None):
    """Run the storage stage for cfg, a dict or a config.Config.

    Returns True when every phase completed.
    """
    if not isinstance(cfg, spindle_config.Config):
        cfg = spindle_config.load_storage_config(cfg)
    stage = StorageStage(target=target, olog=olog,
                         device_timeout=device_timeout,
                         stack_prefix=stack_prefix)
    return stage.run(cfg).success

# vi: ts=4 expandtab syntax=python
