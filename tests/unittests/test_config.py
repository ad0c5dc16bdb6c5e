# This file is part of spindle. See LICENSE file for copyright and license info.

import copy
import json
import textwrap

from spindle import config
from .helpers import CiTestCase


class TestMerge(CiTestCase):

    def test_merge_cfg_string(self):
        d1 = {'storage': {'device_timeout': 30, 'disks': []}}
        cfgstr = "storage: {device_timeout: 10}\nsystemd: {units: []}\n"
        config.merge_config_str(d1, cfgstr)
        self.assertEqual(
            {'storage': {'device_timeout': 10, 'disks': []},
             'systemd': {'units': []}}, d1)

    def test_merge_non_dict_string_raises(self):
        with self.assertRaises(TypeError):
            config.merge_config_str({}, "- a list\n- of things\n")


class TestCmdArg2Cfg(CiTestCase):

    def test_cmdarg_flat(self):
        self.assertEqual(config.cmdarg2cfg("foo=bar"), {'foo': 'bar'})

    def test_dict_nested(self):
        self.assertEqual(config.cmdarg2cfg("storage/device_timeout=30"),
                         {'storage': {'device_timeout': '30'}})

    def test_json_value(self):
        units = [{'name': 'a.service', 'enable': True}]
        self.assertEqual(
            config.cmdarg2cfg("json:systemd/units=" + json.dumps(units)),
            {'systemd': {'units': units}})

    def test_bad_json_raises(self):
        with self.assertRaises(ValueError):
            config.cmdarg2cfg("json:storage/raid=[")

    def test_no_equals_raises(self):
        with self.assertRaises(ValueError):
            config.cmdarg2cfg("storage")

    def test_merge_cmdarg(self):
        cfg = {'storage': {'device_timeout': 90}}
        config.merge_cmdarg(cfg, "json:storage/device_timeout=5")
        self.assertEqual({'storage': {'device_timeout': 5}}, cfg)


class TestLoadConfig(CiTestCase):

    def test_empty_file_is_empty_config(self):
        path = self.tmp_path('empty.yaml')
        with open(path, 'w') as fp:
            fp.write('')
        self.assertEqual({}, config.load_config(path))

    def test_loads_yaml(self):
        path = self.tmp_path('cfg.yaml')
        with open(path, 'w') as fp:
            fp.write(textwrap.dedent("""\
                storage:
                  disks:
                    - device: /dev/sda
                      wipe_table: true
                """))
        self.assertEqual(
            {'storage': {'disks': [{'device': '/dev/sda',
                                    'wipe_table': True}]}},
            config.load_config(path))

    def test_list_raises(self):
        path = self.tmp_path('list.yaml')
        with open(path, 'w') as fp:
            fp.write('- a\n')
        with self.assertRaises(TypeError):
            config.load_config(path)


FULL_CONFIG = {
    'storage': {
        'device_timeout': 30,
        'disks': [
            {'device': '/dev/sda', 'wipe_table': True,
             'partitions': [
                 {'number': 1, 'size': 2048, 'label': 'ROOT',
                  'type_guid': '4F068088-4B73-4A3B-B89A-1F0B7DDA4CB5'},
                 {'number': 2}]},
            {'device': '/dev/sdb'},
        ],
        'raid': [
            {'name': '/dev/md/data', 'level': 'raid5',
             'devices': ['/dev/sdc', '/dev/sdd', '/dev/sde', '/dev/sdf',
                         '/dev/sdg'],
             'spares': 1},
        ],
        'filesystems': [
            {'device': '/dev/sda1', 'format': 'ext4', 'initialize': True,
             'options': ['-L', 'ROOT'],
             'files': [{'path': '/etc/hostname', 'contents': 'node1\n',
                        'mode': '0600'}]},
        ],
    },
    'systemd': {
        'units': [
            {'name': 'etcd.service', 'enable': True,
             'contents': '[Service]\nExecStart=/bin/etcd\n',
             'dropins': [{'name': 'env.conf',
                          'contents': '[Service]\nEnvironment=A=1\n'}]},
            {'name': 'docker.service', 'mask': True},
        ],
    },
    'networkd': {
        'units': [{'name': '00-eth0.network',
                   'contents': '[Match]\nName=eth0\n'}],
    },
}


class TestValidateConfig(CiTestCase):

    def test_full_config_is_valid(self):
        config.validate_config(FULL_CONFIG)

    def test_empty_config_is_valid(self):
        config.validate_config({})

    def test_relative_device_rejected(self):
        cfg = {'storage': {'disks': [{'device': 'sda'}]}}
        with self.assertRaises(ValueError) as ctx:
            config.validate_config(cfg, sourcefile='/etc/spindle.yaml')
        msg = str(ctx.exception)
        self.assertIn('/etc/spindle.yaml', msg)
        self.assertIn('storage/disks/0/device', msg)

    def test_unknown_key_rejected(self):
        cfg = {'storage': {'disks': [{'device': '/dev/sda',
                                      'wipeTable': True}]}}
        with self.assertRaises(ValueError):
            config.validate_config(cfg)

    def test_unknown_format_is_valid(self):
        cfg = {'storage': {'filesystems': [{'device': '/dev/sda1',
                                            'format': 'zfs'}]}}
        config.validate_config(cfg)

    def test_relative_file_path_rejected(self):
        cfg = {'storage': {'filesystems': [
            {'device': '/dev/sda1', 'format': 'ext4',
             'files': [{'path': 'etc/hostname'}]}]}}
        with self.assertRaises(ValueError):
            config.validate_config(cfg)

    def test_bad_timeout_rejected(self):
        with self.assertRaises(ValueError):
            config.validate_config({'storage': {'device_timeout': 0}})

    def test_quoted_boolean_rejected(self):
        for cfg, where in (
                ({'storage': {'filesystems': [
                    {'device': '/dev/sda1', 'format': 'ext4',
                     'initialize': 'no'}]}},
                 'storage/filesystems/0/initialize'),
                ({'storage': {'disks': [
                    {'device': '/dev/sda', 'wipe_table': 'no'}]}},
                 'storage/disks/0/wipe_table'),
                ({'systemd': {'units': [
                    {'name': 'a.service', 'enable': 1}]}},
                 'systemd/units/0/enable')):
            with self.assertRaises(ValueError) as ctx:
                config.validate_config(cfg)
            self.assertIn(where, str(ctx.exception))

    def test_quoted_boolean_does_not_load(self):
        raw = {'storage': {'filesystems': [
            {'device': '/dev/sda1', 'format': 'ext4',
             'initialize': 'no'}]}}
        with self.assertRaises(ValueError):
            config.load_storage_config(raw)


class TestFromDict(CiTestCase):

    def test_empty_config_defaults(self):
        cfg = config.load_storage_config({})
        self.assertEqual([], cfg.storage.disks)
        self.assertEqual([], cfg.storage.raid)
        self.assertEqual([], cfg.storage.filesystems)
        self.assertEqual(config.DEFAULT_DEVICE_TIMEOUT,
                         cfg.storage.device_timeout)
        self.assertEqual([], cfg.systemd.units)
        self.assertEqual([], cfg.networkd.units)

    def test_full_config(self):
        raw = copy.deepcopy(FULL_CONFIG)
        cfg = config.load_storage_config(raw)
        self.assertEqual(raw, FULL_CONFIG)

        sda, sdb = cfg.storage.disks
        self.assertTrue(sda.wipe_table)
        self.assertFalse(sda.is_noop())
        self.assertTrue(sdb.is_noop())
        self.assertEqual(
            config.Partition(
                number=1, size=2048, start=0, label='ROOT',
                type_guid='4F068088-4B73-4A3B-B89A-1F0B7DDA4CB5'),
            sda.partitions[0])
        self.assertEqual(config.Partition(number=2), sda.partitions[1])

        md = cfg.storage.raid[0]
        self.assertEqual('raid5', md.level)
        self.assertEqual(1, md.spares)

        fs = cfg.storage.filesystems[0]
        self.assertTrue(fs.initialize)
        self.assertEqual(['-L', 'ROOT'], fs.options)
        self.assertEqual(
            config.File(path='/etc/hostname', contents='node1\n',
                        mode=0o600, uid=0, gid=0),
            fs.files[0])

        etcd, docker = cfg.systemd.units
        self.assertTrue(etcd.enable)
        self.assertFalse(etcd.mask)
        self.assertEqual('env.conf', etcd.dropins[0].name)
        self.assertTrue(docker.mask)
        self.assertEqual('', docker.contents)
        self.assertEqual('00-eth0.network', cfg.networkd.units[0].name)

    def test_file_defaults(self):
        f = config.fromdict(config.File, {'path': '/etc/motd'})
        self.assertEqual(0o644, f.mode)
        self.assertEqual('', f.contents)
        self.assertEqual(0, f.uid)
        self.assertEqual(0, f.gid)

    def test_fractional_timeout(self):
        cfg = config.load_storage_config(
            {'storage': {'device_timeout': 2.5}})
        self.assertEqual(2.5, cfg.storage.device_timeout)

    def test_wrong_type_raises_serialization_error(self):
        with self.assertRaises(config.SerializationError):
            config.fromdict(config.Partition, {'number': 'one'})

    def test_string_boolean_raises_serialization_error(self):
        with self.assertRaises(config.SerializationError):
            config.fromdict(config.Filesystem,
                            {'device': '/dev/sda1', 'format': 'ext4',
                             'initialize': 'no'})
        with self.assertRaises(config.SerializationError):
            config.fromdict(config.Disk,
                            {'device': '/dev/sda', 'wipe_table': 'false'})

    def test_config_is_frozen(self):
        cfg = config.load_storage_config({})
        with self.assertRaises(AttributeError):
            cfg.storage = None

# vi: ts=4 expandtab syntax=python
