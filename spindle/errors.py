# This file is part of spindle. See LICENSE file for copyright and license info.

"""Errors raised by the storage stage.

Every error is fatal to the pipeline.  Each carries the identity of the
device, unit or file it concerns so a failed boot can be diagnosed from the
log alone.
"""


class StorageError(Exception):
    pass


class DeviceTimeout(StorageError):
    def __init__(self, context, missing, timeout):
        self.context = context
        self.missing = list(missing)
        self.timeout = timeout
        super(DeviceTimeout, self).__init__(
            "timed out after %ss waiting on %s devices: %s" %
            (timeout, context, ', '.join(self.missing)))


class CommitError(StorageError):
    def __init__(self, device, reason):
        self.device = device
        self.reason = reason
        super(CommitError, self).__init__(
            "commit failure on %s: %s" % (device, reason))


class ExternalToolError(StorageError):
    def __init__(self, cmd, reason):
        self.cmd = list(cmd)
        self.reason = reason
        super(ExternalToolError, self).__init__(
            "failed to run %s: %s" % (self.cmd, reason))


class UnsupportedFormat(StorageError, ValueError):
    def __init__(self, fmt, device=None):
        self.format = fmt
        self.device = device
        super(UnsupportedFormat, self).__init__(
            "unsupported filesystem format: %r" % fmt)


class MountError(StorageError):
    def __init__(self, device, path, reason):
        self.device = device
        self.path = path
        self.reason = reason
        super(MountError, self).__init__(
            "failed to mount device %s at %s: %s" % (device, path, reason))


class UnmountError(StorageError):
    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super(UnmountError, self).__init__(
            "failed to unmount %s: %s" % (path, reason))


class FileWriteError(StorageError):
    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super(FileWriteError, self).__init__(
            "failed to create file %s: %s" % (path, reason))

# vi: ts=4 expandtab syntax=python
