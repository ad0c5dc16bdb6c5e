# This file is part of spindle. See LICENSE file for copyright and license info.

import argparse
import os
import sys
import traceback

from .. import log
from .. import util
from .. import version

VERSIONSTR = version.version_string()

SUB_COMMAND_MODULES = ['storage', 'version']


def add_subcmd(subparser, subcmd):
    modname = subcmd.replace("-", "_")
    subcmd_full = "spindle.commands.%s" % modname
    __import__(subcmd_full)
    try:
        popfunc = getattr(sys.modules[subcmd_full], 'POPULATE_SUBCMD')
    except AttributeError:
        raise AttributeError("No 'POPULATE_SUBCMD' in %s" % subcmd_full)

    popfunc(subparser.add_parser(subcmd))


def get_main_parser(stacktrace=False, verbosity=0,
                    parser_class=argparse.ArgumentParser):
    parser = parser_class(prog='spindle', epilog='Version %s' % VERSIONSTR)
    parser.add_argument('--showtrace', action='store_true', default=stacktrace)
    parser.add_argument('-v', '--verbose', action='count', default=verbosity,
                        dest='verbosity')
    parser.add_argument('--log-file', default=sys.stderr,
                        type=argparse.FileType('w'))
    parser.add_argument('-c', '--config', action=util.MergedCmdAppend,
                        help='read configuration from cfg',
                        metavar='FILE', type=argparse.FileType("rb"),
                        dest='main_cfgopts', default=[])
    parser.add_argument('--set', action=util.MergedCmdAppend,
                        help=('define a config variable. key can be a "/" '
                              'delimited path ("storage/device_timeout=30"). '
                              'if key starts with "json:" then val is loaded '
                              'as json (json:storage/raid="[]")'),
                        metavar='key=val', dest='main_cfgopts')
    parser.set_defaults(config={})
    parser.set_defaults(config_source=None)
    parser.set_defaults(reportstack=None)

    return parser


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    stacktrace = (os.environ.get('SPINDLE_STACKTRACE', "0").lower()
                  not in ("0", "false", ""))

    try:
        verbosity = int(os.environ.get('SPINDLE_VERBOSITY', "0"))
    except ValueError:
        verbosity = 1

    from .. import config
    from ..reporter import (events, update_configuration)

    parser = get_main_parser(stacktrace=stacktrace, verbosity=verbosity)
    subps = parser.add_subparsers(dest="subcmd")
    for subcmd in SUB_COMMAND_MODULES:
        add_subcmd(subps, subcmd)
    args = parser.parse_args(argv)

    # merge config flags into a single config dictionary
    cfg = {}
    for (flag, val) in args.main_cfgopts:
        if flag in ('-c', '--config'):
            if args.config_source is None:
                args.config_source = val.name
            config.merge_config_fp(cfg, val)
            val.close()
        elif flag in ('--set'):
            config.merge_cmdarg(cfg, val)
    if not args.main_cfgopts and os.environ.get('SPINDLE_CONFIG'):
        args.config_source = os.environ['SPINDLE_CONFIG']
        cfg = config.load_config(args.config_source)

    args.config = cfg

    showtrace = args.showtrace
    if 'showtrace' in cfg:
        showtrace = str(cfg['showtrace']).lower() not in ("0", "false")
    os.environ['SPINDLE_STACKTRACE'] = str(int(showtrace))

    verbosity = args.verbosity
    if 'verbosity' in cfg:
        verbosity = int(cfg['verbosity'])
    os.environ['SPINDLE_VERBOSITY'] = str(verbosity)

    if not getattr(args, 'func', None):
        # http://bugs.python.org/issue16308
        parser.print_help()
        sys.exit(1)

    log.basicConfig(stream=args.log_file, verbosity=verbosity)

    # set up the reportstack
    update_configuration(cfg.get('reporting', {}))

    stack_prefix = (os.environ.get("SPINDLE_REPORTSTACK", "") +
                    "/cmd-%s" % args.subcmd)
    if stack_prefix.startswith("/"):
        stack_prefix = stack_prefix[1:]
    os.environ["SPINDLE_REPORTSTACK"] = stack_prefix
    args.reportstack = events.ReportEventStack(
        name=stack_prefix, reporting_enabled=True, level="DEBUG",
        description="spindle command %s" % args.subcmd)

    try:
        with args.reportstack:
            ret = args.func(args)
        sys.exit(ret)
    except Exception as e:
        if showtrace:
            traceback.print_exc()
        sys.stderr.write("%s\n" % e)
        sys.exit(3)


if __name__ == '__main__':
    sys.exit(main())

# vi: ts=4 expandtab syntax=python
