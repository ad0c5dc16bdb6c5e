# This file is part of spindle. See LICENSE file for copyright and license info.

import json
import typing

import attr
import jsonschema
import yaml

from spindle import schemas
from spindle.futil import decode_perms

DEFAULT_DEVICE_TIMEOUT = 90


def merge_config_fp(cfgin, fp):
    merge_config_str(cfgin, fp.read())


def merge_config_str(cfgin, cfgstr):
    cfg2 = yaml.safe_load(cfgstr)
    if not isinstance(cfg2, dict):
        raise TypeError("Failed reading config. not a dictionary: %s" % cfgstr)

    merge_config(cfgin, cfg2)


def merge_config(cfg, cfg2):
    # update cfg by merging cfg2 over the top
    for k, v in cfg2.items():
        if isinstance(v, dict) and isinstance(cfg.get(k, None), dict):
            merge_config(cfg[k], v)
        else:
            cfg[k] = v


def merge_cmdarg(cfg, cmdarg, delim="/"):
    merge_config(cfg, cmdarg2cfg(cmdarg, delim))


def cmdarg2cfg(cmdarg, delim="/"):
    if '=' not in cmdarg:
        raise ValueError('no "=" in "%s"' % cmdarg)

    key, val = cmdarg.split("=", 1)
    cfg = {}
    cur = cfg

    is_json = False
    if key.startswith("json:"):
        is_json = True
        key = key[5:]

    items = key.split(delim)
    for item in items[:-1]:
        cur[item] = {}
        cur = cur[item]

    if is_json:
        try:
            val = json.loads(val)
        except (ValueError, TypeError):
            raise ValueError("setting of key '%s' had invalid json: %s" %
                             (key, val))

    # this would occur if 'json:={"topkey": "topval"}'
    if items[-1] == "":
        cfg = val
    else:
        cur[items[-1]] = val

    return cfg


def load_config(cfg_file):
    with open(cfg_file, "r") as fp:
        content = fp.read()
    cfg = yaml.safe_load(content)
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise TypeError("Failed reading config %s. not a dictionary" %
                        cfg_file)
    return cfg


def validate_config(config, sourcefile=None):
    """Check the structure of a raw config dictionary.

    Raises ValueError naming the offending element and source file.
    """
    if not sourcefile:
        sourcefile = '<config>'
    try:
        jsonschema.validate(config, schemas.CONFIG)
    except jsonschema.exceptions.ValidationError as e:
        where = '/'.join(str(p) for p in e.absolute_path) or 'top-level'
        raise ValueError("%s: invalid config at %s: %s" %
                         (sourcefile, where, e.message))


@attr.s(auto_attribs=True, frozen=True)
class Partition:
    number: int
    # sectors, 0 means the rest of the disk
    size: int = 0
    # sectors, 0 means the next free sector
    start: int = 0
    label: str = ""
    type_guid: str = ""


@attr.s(auto_attribs=True, frozen=True)
class Disk:
    device: str
    wipe_table: bool = False
    partitions: typing.List[Partition] = attr.Factory(list)

    def is_noop(self) -> bool:
        return not self.wipe_table and not self.partitions


@attr.s(auto_attribs=True, frozen=True)
class Array:
    name: str
    level: str
    devices: typing.List[str] = attr.Factory(list)
    spares: int = 0


@attr.s(auto_attribs=True, frozen=True)
class File:
    path: str
    contents: str = ""
    mode: int = attr.ib(default=0o644, converter=decode_perms)
    uid: typing.Optional[int] = 0
    gid: typing.Optional[int] = 0


@attr.s(auto_attribs=True, frozen=True)
class Filesystem:
    device: str
    format: str
    options: typing.List[str] = attr.Factory(list)
    initialize: bool = False
    files: typing.List[File] = attr.Factory(list)


@attr.s(auto_attribs=True, frozen=True)
class DropIn:
    name: str
    contents: str = ""


@attr.s(auto_attribs=True, frozen=True)
class SystemdUnit:
    name: str
    contents: str = ""
    enable: bool = False
    mask: bool = False
    dropins: typing.List[DropIn] = attr.Factory(list)


@attr.s(auto_attribs=True, frozen=True)
class NetworkdUnit:
    name: str
    contents: str = ""


@attr.s(auto_attribs=True, frozen=True)
class Storage:
    disks: typing.List[Disk] = attr.Factory(list)
    raid: typing.List[Array] = attr.Factory(list)
    filesystems: typing.List[Filesystem] = attr.Factory(list)
    device_timeout: typing.Union[int, float] = DEFAULT_DEVICE_TIMEOUT


@attr.s(auto_attribs=True, frozen=True)
class Systemd:
    units: typing.List[SystemdUnit] = attr.Factory(list)


@attr.s(auto_attribs=True, frozen=True)
class Networkd:
    units: typing.List[NetworkdUnit] = attr.Factory(list)


@attr.s(auto_attribs=True, frozen=True)
class Config:
    storage: Storage = attr.Factory(Storage)
    systemd: Systemd = attr.Factory(Systemd)
    networkd: Networkd = attr.Factory(Networkd)


class SerializationError(Exception):
    def __init__(self, obj, path, message):
        self.obj = obj
        self.path = path
        self.message = message

    def __str__(self):
        p = self.path
        if not p:
            p = 'top-level'
        return f"processing {self.obj}: at {p}, {self.message}"


@attr.s(auto_attribs=True)
class SerializationContext:
    obj: typing.Any
    cur: typing.Any
    path: str
    metadata: typing.Optional[typing.Dict]

    @classmethod
    def new(cls, obj):
        return SerializationContext(obj, obj, '', {})

    def child(self, path, cur, metadata=None):
        if metadata is None:
            metadata = self.metadata
        return attr.evolve(
            self, path=self.path + path, cur=cur, metadata=metadata)

    def error(self, message):
        raise SerializationError(self.obj, self.path, message)

    def assert_type(self, typ):
        if type(self.cur) is not typ:
            self.error("{!r} is not a {}".format(self.cur, typ))


class Deserializer:

    def __init__(self):
        self.typing_walkers = {
            list: self._walk_List,
            typing.List: self._walk_List,
            typing.Union: self._walk_Union,
            }
        self.type_deserializers = {}
        for typ in int, str, bool, list, dict, type(None):
            self.type_deserializers[typ] = self._scalar
        self.type_deserializers[float] = self._float

    def _scalar(self, annotation, context):
        context.assert_type(annotation)
        return context.cur

    def _float(self, annotation, context):
        if type(context.cur) is int:
            return float(context.cur)
        return self._scalar(annotation, context)

    def _walk_List(self, meth, args, context):
        context.assert_type(list)
        return [
            meth(args[0], context.child(f'[{i}]', v))
            for i, v in enumerate(context.cur)
            ]

    def _walk_Union(self, meth, args, context):
        if context.cur is None:
            return context.cur
        NoneType = type(None)
        if NoneType in args:
            args = [a for a in args if a is not NoneType]
            if len(args) == 1:
                # I.e. Optional[thing]
                return meth(args[0], context)
        for a in args:
            if type(context.cur) is a:
                return meth(a, context)
        if isinstance(context.cur, list):
            return meth(list, context)
        if isinstance(context.cur, str):
            return meth(str, context)
        context.error(f"cannot serialize Union[{args}]")

    def _deserialize_attr(self, annotation, context):
        context.assert_type(dict)
        args = {}
        fields = {
            field.name: field for field in attr.fields(annotation)
            }
        for key, value in context.cur.items():
            key = key.replace("-", "_")
            if key not in fields:
                continue
            field = fields[key]
            if field.converter:
                value = field.converter(value)
            args[field.name] = self._deserialize(
                field.type,
                context.child(f'[{key!r}]', value, field.metadata))
        return annotation(**args)

    def _deserialize(self, annotation, context):
        if annotation is None:
            context.assert_type(type(None))
            return None
        if annotation is typing.Any:
            return context.cur
        if attr.has(annotation):
            return self._deserialize_attr(annotation, context)
        origin = getattr(annotation, '__origin__', None)
        if origin is not None:
            return self.typing_walkers[origin](
                self._deserialize, annotation.__args__, context)
        return self.type_deserializers[annotation](annotation, context)

    def deserialize(self, annotation, value):
        context = SerializationContext.new(value)
        return self._deserialize(annotation, context)


T = typing.TypeVar("T")


def fromdict(cls: typing.Type[T], d) -> T:
    deserializer = Deserializer()
    return deserializer.deserialize(cls, d)


def load_storage_config(cfg, sourcefile=None):
    """Validate a raw config dictionary and return a Config snapshot."""
    validate_config(cfg, sourcefile=sourcefile)
    return fromdict(Config, cfg)

# vi: ts=4 expandtab syntax=python
