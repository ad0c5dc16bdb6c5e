# This file is part of spindle. See LICENSE file for copyright and license info.

import contextlib
import mock
import os
import shutil
import tempfile
from unittest import TestCase

# bound at import so tests patching tempfile.mkdtemp don't affect tmp_dir()
_mkdtemp = tempfile.mkdtemp


@contextlib.contextmanager
def simple_mocked_open(content=None):
    if not content:
        content = ''
    m_open = mock.mock_open(read_data=content)
    with mock.patch('builtins.open', m_open, create=True):
        yield m_open


class CiTestCase(TestCase):
    """Common testing class which all spindle unit tests subclass."""

    def add_patch(self, target, attr, **kwargs):
        """Patches specified target object and sets it as attr on test
        instance also schedules cleanup"""
        if 'autospec' not in kwargs:
            kwargs['autospec'] = True
        m = mock.patch(target, **kwargs)
        p = m.start()
        self.addCleanup(m.stop)
        setattr(self, attr, p)

    def tmp_dir(self, dir=None, cleanup=True):
        """Return a full path to a temporary directory for the test run."""
        if dir is None:
            tmpd = _mkdtemp(
                prefix="spindle-ci-%s." % self.__class__.__name__)
        else:
            tmpd = _mkdtemp(dir=dir)
        if cleanup:
            self.addCleanup(shutil.rmtree, tmpd)
        return tmpd

    def tmp_path(self, path, _dir=None):
        # return an absolute path to 'path' under dir.
        # if dir is None, one will be created with tmp_dir()
        # the file is not created or modified.
        if _dir is None:
            _dir = self.tmp_dir()

        return os.path.normpath(
            os.path.abspath(os.path.sep.join((_dir, path))))


def dir2dict(startdir, prefix=None):
    flist = {}
    if prefix is None:
        prefix = startdir
    for root, dirs, files in os.walk(startdir):
        for fname in files:
            fpath = os.path.join(root, fname)
            key = fpath[len(prefix):]
            if os.path.islink(fpath):
                flist[key] = '-> ' + os.readlink(fpath)
                continue
            with open(fpath, "r") as fp:
                flist[key] = fp.read()
    return flist

# vi: ts=4 expandtab syntax=python
