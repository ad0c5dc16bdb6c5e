# This file is part of spindle. See LICENSE file for copyright and license info.

import mock

from spindle import util
from spindle.block import mdadm
from spindle.errors import ExternalToolError
from .helpers import CiTestCase


class TestMdadmCreateArgs(CiTestCase):

    def test_spares_are_counted_out_of_devices(self):
        devices = ['/dev/sdb', '/dev/sdc', '/dev/sdd', '/dev/sde',
                   '/dev/sdf']
        self.assertEqual(
            ['mdadm', '--create', '/dev/md/data', '--force', '--run',
             '--level', 'raid5', '--raid-devices', '4',
             '--spare-devices', '1'] + devices,
            mdadm.mdadm_create_args('/dev/md/data', 'raid5', devices,
                                    spares=1))

    def test_no_spares_flag_without_spares(self):
        cmd = mdadm.mdadm_create_args('/dev/md0', '1',
                                      ['/dev/sda1', '/dev/sdb1'])
        self.assertNotIn('--spare-devices', cmd)
        self.assertEqual(['--raid-devices', '2'], cmd[7:9])
        self.assertEqual(['/dev/sda1', '/dev/sdb1'], cmd[-2:])


class TestMdadmCreate(CiTestCase):

    def setUp(self):
        super(TestMdadmCreate, self).setUp()
        self.olog = mock.Mock()
        self.add_patch('spindle.block.mdadm.util.subp', 'm_subp',
                       return_value=('', ''))

    def test_create_runs_logged_command(self):
        mdadm.mdadm_create('/dev/md0', 'raid1', ['/dev/sda', '/dev/sdb'],
                           olog=self.olog)
        self.olog.log_cmd.assert_called_once_with(
            mdadm.mdadm_create_args('/dev/md0', 'raid1',
                                    ['/dev/sda', '/dev/sdb']),
            'creating %s', '/dev/md0')
        self.assertEqual(0, self.m_subp.call_count)

    def test_failure_is_external_tool_error(self):
        self.olog.log_cmd.side_effect = util.ProcessExecutionError(
            exit_code=1, stderr='mdadm: no raid-devices specified.')
        with self.assertRaises(ExternalToolError) as ctx:
            mdadm.mdadm_create('/dev/md0', 'raid1', ['/dev/sda'],
                               olog=self.olog)
        self.assertEqual('mdadm', ctx.exception.cmd[0])
        self.assertIn('/dev/md0', ctx.exception.cmd)
        # lsmod and find of the md modules for the debug log
        self.assertEqual(2, self.m_subp.call_count)

    def test_module_listing_failure_keeps_original_error(self):
        self.olog.log_cmd.side_effect = util.ProcessExecutionError(
            exit_code=1)
        self.m_subp.side_effect = util.ProcessExecutionError(exit_code=127)
        with self.assertRaises(ExternalToolError):
            mdadm.mdadm_create('/dev/md0', 'raid0', ['/dev/sda'],
                               olog=self.olog)

# vi: ts=4 expandtab syntax=python
