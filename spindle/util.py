# This file is part of spindle. See LICENSE file for copyright and license info.

import argparse
from contextlib import contextmanager
import errno
import os
import subprocess
import tempfile

from .errors import MountError, UnmountError
from .log import LOG, OperationLogger


def subp(args, data=None, rcs=None, capture=False):
    """Run a subprocess once and wait for it to exit.

    :param args: command to run in a list. [cmd, arg1, arg2...]
    :param data: input to the command, made available on its stdin.
    :param rcs:
        a list of allowed return codes.  If subprocess exits with a value not
        in this list, a ProcessExecutionError will be raised.
    :param capture:
        boolean indicating if output should be captured.  If True, then stderr
        and stdout will be returned decoded as text.  If False, they will not
        be redirected.

    :return
        if not capturing, return is (None, None)
        if capturing, stdout and stderr are returned.
    """
    if rcs is None:
        rcs = [0]
    devnull_fp = None

    if isinstance(args, str):
        args = [args]
    args = list(args)

    LOG.debug("Running command %s with allowed return codes %s (capture=%s)",
              args, rcs, capture)
    try:
        stdin = None
        stdout = None
        stderr = None
        if capture:
            stdout = subprocess.PIPE
            stderr = subprocess.PIPE
        if data is None:
            devnull_fp = open(os.devnull)
            stdin = devnull_fp
        else:
            stdin = subprocess.PIPE
        sp = subprocess.Popen(args, stdout=stdout,
                              stderr=stderr, stdin=stdin, shell=False)
        (out, err) = sp.communicate(data)

        # Just ensure blank instead of none.
        if capture:
            out = decode_binary(out or b'')
            err = decode_binary(err or b'')
    except OSError as e:
        raise ProcessExecutionError(cmd=args, reason=e)
    finally:
        if devnull_fp:
            devnull_fp.close()

    rc = sp.returncode
    if rc not in rcs:
        raise ProcessExecutionError(stdout=out, stderr=err,
                                    exit_code=rc,
                                    cmd=args)
    return (out, err)


class ProcessExecutionError(IOError):

    MESSAGE_TMPL = ('%(description)s\n'
                    'Command: %(cmd)s\n'
                    'Exit code: %(exit_code)s\n'
                    'Reason: %(reason)s\n'
                    'Stdout: %(stdout)s\n'
                    'Stderr: %(stderr)s')
    stdout_indent_level = 8

    def __init__(self, stdout=None, stderr=None,
                 exit_code=None, cmd=None,
                 description=None, reason=None):
        if not cmd:
            self.cmd = '-'
        else:
            self.cmd = cmd

        if not description:
            self.description = 'Unexpected error while running command.'
        else:
            self.description = description

        if not isinstance(exit_code, int):
            self.exit_code = '-'
        else:
            self.exit_code = exit_code

        if not stderr:
            self.stderr = "''"
        else:
            self.stderr = self._indent_text(stderr)

        if not stdout:
            self.stdout = "''"
        else:
            self.stdout = self._indent_text(stdout)

        if reason:
            self.reason = reason
        else:
            self.reason = '-'

        message = self.MESSAGE_TMPL % {
            'description': self.description,
            'cmd': self.cmd,
            'exit_code': self.exit_code,
            'stdout': self.stdout,
            'stderr': self.stderr,
            'reason': self.reason,
        }
        IOError.__init__(self, message)

    def _indent_text(self, text):
        if isinstance(text, bytes):
            text = text.decode()
        return text.replace('\n', '\n' + ' ' * self.stdout_indent_level)


def is_mounted(target):
    # return whether or not something is mounted on target
    mounts = ""
    with open("/proc/mounts", "r") as fp:
        mounts = fp.read()

    # the kernel records mount points with symlinks resolved
    target = os.path.realpath(target)
    for line in mounts.splitlines():
        if line.split()[1] == target:
            return True
    return False


def do_mount(src, target, opts=None):
    # mount src at target with opts and return True
    # if already mounted, return False
    if opts is None:
        opts = []
    if isinstance(opts, str):
        opts = [opts]

    if is_mounted(target):
        return False

    ensure_dir(target)
    cmd = ['mount'] + opts + [src, target]
    subp(cmd, capture=True)
    return True


def do_umount(mountpoint):
    # umount exits non-zero when nothing is mounted at mountpoint
    subp(['umount', mountpoint], capture=True)


def _release_mount(mnt, device, olog):
    # best effort, returns the error instead of raising it
    try:
        olog.log_op(lambda: do_umount(mnt), "unmounting %s at %s",
                    device, mnt)
    except (ProcessExecutionError, OSError) as e:
        return e
    return None


def _remove_mountpoint(mnt, olog):
    try:
        os.rmdir(mnt)
    except OSError as e:
        olog.warning("failed to remove temporary mount point %s: %s", mnt, e)


@contextmanager
def scoped_mount(device, fstype, olog=None, prefix='spindle-files-'):
    """Mount device on a fresh temporary directory for the with block.

    Yields the mount point.  The unmount is attempted on every exit path and
    the directory is removed afterwards.  An unmount failure while the body
    is already failing is only logged so the original error propagates; an
    unmount failure after a successful body raises UnmountError.
    """
    if olog is None:
        olog = OperationLogger()
    try:
        mnt = os.path.realpath(tempfile.mkdtemp(prefix=prefix))
    except OSError as e:
        raise MountError(device, None, "failed to create temp directory: %s"
                         % e) from e
    try:
        try:
            olog.log_op(lambda: do_mount(device, mnt, opts=['-t', fstype]),
                        "mounting %s at %s", device, mnt)
        except (ProcessExecutionError, OSError) as e:
            # a mount that errored may still have attached
            try:
                attached = is_mounted(mnt)
            except OSError:
                attached = True
            if attached:
                _release_mount(mnt, device, olog)
            raise MountError(device, mnt, e) from e

        try:
            yield mnt
        except BaseException:
            err = _release_mount(mnt, device, olog)
            if err is not None:
                olog.warning("ignoring unmount failure of %s: %s", mnt, err)
            raise

        err = _release_mount(mnt, device, olog)
        if err is not None:
            raise UnmountError(mnt, err) from err
    finally:
        _remove_mountpoint(mnt, olog)


def ensure_dir(path, mode=None):
    if path == "":
        path = "."
    try:
        os.makedirs(path)
    except OSError as e:
        if e.errno != errno.EEXIST:
            raise

    if mode is not None:
        os.chmod(path, mode)


def write_file(filename, content, mode=0o644, omode="w"):
    """
    write 'content' to file at 'filename' using python open mode 'omode'.
    if mode is not set, then chmod file to mode. mode is 644 by default
    """
    ensure_dir(os.path.dirname(filename))
    with open(filename, omode) as fp:
        fp.write(content)
    if mode:
        os.chmod(filename, mode)


def decode_binary(blob, encoding='utf-8', errors='replace'):
    # Converts a binary type into a text type using given encoding.
    return blob.decode(encoding, errors=errors)


def del_file(path):
    try:
        os.unlink(path)
        LOG.debug("del_file: removed %s", path)
    except OSError as e:
        if e.errno != errno.ENOENT:
            raise e
        LOG.debug("del_file: %s did not exist.", path)


class MergedCmdAppend(argparse.Action):
    """This appends to a list in order of appearence both the option string
       and the value"""
    def __call__(self, parser, namespace, values, option_string=None):
        if getattr(namespace, self.dest, None) is None:
            setattr(namespace, self.dest, [])
        getattr(namespace, self.dest).append((option_string, values,))

# vi: ts=4 expandtab syntax=python
