# This file is part of spindle. See LICENSE file for copyright and license info.

# The 'FEATURES' variable is provided so that users of spindle
# can determine which features are supported.  Each entry should have
# a consistent meaning.
FEATURES = [
    # storage stage writes gpt partition tables with sgdisk
    'STORAGE_GPT_PARTITIONS',
    # storage stage assembles md raid arrays, spares included
    'STORAGE_RAID',
    # filesystems may be populated without being formatted (initialize: false)
    'STORAGE_FILESYSTEM_REUSE',
    # systemd units, dropins, presets and masks are written to the target
    'SYSTEMD_UNITS',
    # networkd units are written to the target
    'NETWORKD_UNITS',
    # reporter supports 'log' and 'print' types
    'REPORTING_EVENTS',
    # has storage-config schema validation
    'CONFIG_SCHEMA',
]

__version__ = "0.4"

# vi: ts=4 expandtab syntax=python
