# This file is part of spindle. See LICENSE file for copyright and license info.

import mock

from spindle import log
from spindle import util
from .helpers import CiTestCase


class TestOperationLogger(CiTestCase):

    def setUp(self):
        super(TestOperationLogger, self).setUp()
        self.logger = mock.Mock()
        self.olog = log.OperationLogger(logger=self.logger)

    def messages(self, level=None):
        return [c[0][1] for c in self.logger.log.call_args_list
                if level is None or c[0][0] == level]

    def test_prefixes_nest(self):
        self.olog.push_prefix("createFilesystems")
        with self.olog.prefix("createFiles"):
            self.olog.info("writing %s", "/etc/hostname")
        self.olog.info("done")
        self.olog.pop_prefix()
        self.olog.info("outside")
        self.assertEqual(
            ["createFilesystems: createFiles: writing /etc/hostname",
             "createFilesystems: done",
             "outside"],
            self.messages())

    def test_prefix_popped_on_exception(self):
        with self.assertRaises(RuntimeError):
            with self.olog.prefix("createRaids"):
                raise RuntimeError("boom")
        self.assertEqual([], self.olog.prefixes)

    def test_log_op_returns_value_and_logs_start_finish(self):
        ret = self.olog.log_op(lambda: 42, "partitioning %s", "/dev/sda")
        self.assertEqual(42, ret)
        infos = self.messages(log.INFO)
        self.assertEqual(2, len(infos))
        self.assertIn("[started]  partitioning /dev/sda", infos[0])
        self.assertIn("[finished] partitioning /dev/sda", infos[1])

    def test_log_op_logs_failure_and_reraises(self):
        def fail():
            raise OSError("no space left")

        with self.assertRaises(OSError):
            self.olog.log_op(fail, "writing file %s", "/etc/motd")
        crits = self.messages(log.CRITICAL)
        self.assertEqual(1, len(crits))
        self.assertIn("[failed]   writing file /etc/motd: no space left",
                      crits[0])
        self.assertFalse(
            any('[finished]' in m for m in self.messages(log.INFO)))

    def test_log_op_format_without_args_keeps_percent(self):
        self.olog.log_op(lambda: None, "100% done")
        self.assertIn("[started]  100% done", self.messages(log.INFO)[0])

    @mock.patch('spindle.util.subp')
    def test_log_cmd_runs_captured_command(self, m_subp):
        m_subp.return_value = ("out\n", "")
        self.olog.log_cmd(['mdadm', '--create', '/dev/md0'],
                          "creating %s", "/dev/md0")
        m_subp.assert_called_with(['mdadm', '--create', '/dev/md0'],
                                  capture=True)
        self.assertIn("stdout: out", self.messages(log.DEBUG))

    @mock.patch('spindle.util.subp')
    def test_log_cmd_propagates_failure(self, m_subp):
        m_subp.side_effect = util.ProcessExecutionError(exit_code=1)
        with self.assertRaises(util.ProcessExecutionError):
            self.olog.log_cmd(['false'], "running false")


class TestBasicConfig(CiTestCase):

    def test_verbosity_sets_level(self):
        logger = log._getLogger()
        self.addCleanup(logger.setLevel, logger.level)
        self.addCleanup(log.logging.getLogger().setLevel,
                        log.logging.getLogger().level)
        log.basicConfig(verbosity=2)
        self.assertEqual(log.DEBUG, logger.level)
        log.basicConfig(verbosity=0)
        self.assertEqual(log.ERROR, logger.level)

# vi: ts=4 expandtab syntax=python
