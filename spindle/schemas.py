# This file is part of spindle. See LICENSE file for copyright and license info.

_path_dev = r'^/dev/[^/]+(/[^/]+)*$'
_path_abs = r'^/.*$'
_guid_pattern = (
    r'^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-'
    r'[0-9a-fA-F]{12}$')

definitions = {
    'devpath': {'type': 'string', 'pattern': _path_dev},
    'name': {'type': 'string', 'minLength': 1},
    'boolean': {'type': 'boolean'},
    'sectors': {'type': 'integer', 'minimum': 0},
    'mode': {
        'oneOf': [
            {'type': 'integer', 'minimum': 0, 'maximum': 0o7777},
            {'type': 'string', 'pattern': r'^0?[0-7]{3,4}$'}]},
    'id': {'type': ['integer', 'null'], 'minimum': 0},
    'contents': {'type': 'string'},
}

PARTITION = {
    'type': 'object',
    'required': ['number'],
    'additionalProperties': False,
    'properties': {
        'number': {'type': 'integer', 'minimum': 1},
        'size': {'$ref': '#/definitions/sectors'},
        'start': {'$ref': '#/definitions/sectors'},
        'label': {'type': 'string', 'maxLength': 36},
        'type_guid': {
            'oneOf': [{'type': 'string', 'pattern': _guid_pattern},
                      {'type': 'string', 'maxLength': 0}]},
    },
}

DISK = {
    'type': 'object',
    'required': ['device'],
    'additionalProperties': False,
    'properties': {
        'device': {'$ref': '#/definitions/devpath'},
        'wipe_table': {'$ref': '#/definitions/boolean'},
        'partitions': {'type': 'array', 'items': PARTITION},
    },
}

RAID = {
    'type': 'object',
    'required': ['name', 'level', 'devices'],
    'additionalProperties': False,
    'properties': {
        'name': {'$ref': '#/definitions/devpath'},
        'level': {'type': 'string', 'minLength': 1},
        'devices': {
            'type': 'array', 'minItems': 1,
            'items': {'$ref': '#/definitions/devpath'}},
        'spares': {'type': 'integer', 'minimum': 0},
    },
}

FILE = {
    'type': 'object',
    'required': ['path'],
    'additionalProperties': False,
    'properties': {
        'path': {'type': 'string', 'pattern': _path_abs},
        'contents': {'$ref': '#/definitions/contents'},
        'mode': {'$ref': '#/definitions/mode'},
        'uid': {'$ref': '#/definitions/id'},
        'gid': {'$ref': '#/definitions/id'},
    },
}

# 'format' is deliberately free-form here; an unknown formatter is reported
# by the storage stage when it tries to initialize the filesystem.
FILESYSTEM = {
    'type': 'object',
    'required': ['device', 'format'],
    'additionalProperties': False,
    'properties': {
        'device': {'$ref': '#/definitions/devpath'},
        'format': {'type': 'string', 'minLength': 1},
        'options': {'type': 'array', 'items': {'type': 'string'}},
        'initialize': {'$ref': '#/definitions/boolean'},
        'files': {'type': 'array', 'items': FILE},
    },
}

DROPIN = {
    'type': 'object',
    'required': ['name'],
    'additionalProperties': False,
    'properties': {
        'name': {'$ref': '#/definitions/name'},
        'contents': {'$ref': '#/definitions/contents'},
    },
}

SYSTEMD_UNIT = {
    'type': 'object',
    'required': ['name'],
    'additionalProperties': False,
    'properties': {
        'name': {'$ref': '#/definitions/name'},
        'contents': {'$ref': '#/definitions/contents'},
        'enable': {'$ref': '#/definitions/boolean'},
        'mask': {'$ref': '#/definitions/boolean'},
        'dropins': {'type': 'array', 'items': DROPIN},
    },
}

NETWORKD_UNIT = {
    'type': 'object',
    'required': ['name'],
    'additionalProperties': False,
    'properties': {
        'name': {'$ref': '#/definitions/name'},
        'contents': {'$ref': '#/definitions/contents'},
    },
}

CONFIG = {
    '$schema': 'http://json-schema.org/draft-07/schema#',
    'name': 'SPINDLE-CONFIG',
    'title': 'spindle firstboot storage and unit configuration.',
    'description': (
        'Declarative syntax for disks, raid arrays, filesystems and the '
        'systemd and networkd units written to the target.'),
    'type': 'object',
    'definitions': definitions,
    'properties': {
        'storage': {
            'type': 'object',
            'additionalProperties': False,
            'properties': {
                'device_timeout': {'type': 'number', 'exclusiveMinimum': 0},
                'disks': {'type': 'array', 'items': DISK},
                'raid': {'type': 'array', 'items': RAID},
                'filesystems': {'type': 'array', 'items': FILESYSTEM},
            },
        },
        'systemd': {
            'type': 'object',
            'additionalProperties': False,
            'properties': {
                'units': {'type': 'array', 'items': SYSTEMD_UNIT},
            },
        },
        'networkd': {
            'type': 'object',
            'additionalProperties': False,
            'properties': {
                'units': {'type': 'array', 'items': NETWORKD_UNIT},
            },
        },
    },
}

# vi: ts=4 expandtab syntax=python
