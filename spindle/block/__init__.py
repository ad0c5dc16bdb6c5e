# This file is part of spindle. See LICENSE file for copyright and license info.

# Wrappers around the block device tools used by the storage stage:
# sgdisk (gpt tables), mdadm (software raid) and mkfs.<fstype>.

# vi: ts=4 expandtab syntax=python
