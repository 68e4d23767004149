#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Run configuration and the per-client defaults cascade.

A RunConfig is built once from the parsed YAML tree and never mutated.
Per-client settings come from resolve(), a pure function that overlays a
ClientSpec on the (normalized) Defaults."""

import collections

from hostsign import BatchSignError


class ConfigError(BatchSignError):
    """The configuration file is unreadable, malformed or incomplete"""


# Fallbacks when neither the client nor the defaults section sets a value.
BUILTIN_DEFAULTS = {
    "duration": "0",
    "version": 0,
    "ca_crt": "ca.crt",
    "ca_key": "ca.key",
    "out_crt": "hosts/{{name}}.crt",
    "out_key": "hosts/{{name}}.key",
    "sign_cmd_post": "",
}

# Fields a client may override, in the order they are documented.
OVERRIDABLE = tuple(BUILTIN_DEFAULTS)


def _as_str(value, field):
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ConfigError(f"{field} must be a scalar, got {value!r}")
    return str(value)


def _as_int(value, field):
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ConfigError(f"{field} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{field} must be an integer, got {value!r}") from None


def _as_list(value, field):
    """YAML list, or a single comma separated string"""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    elif not isinstance(value, list):
        raise ConfigError(f"{field} must be a list, got {value!r}")
    return [
        str(item).strip()
        for item in value
        if item is not None and str(item).strip()
    ]


def _section(tree, key):
    section = tree.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{key}' must be a mapping, got {section!r}")
    return section


def _read_overrides(section, where):
    values = {}
    for field in OVERRIDABLE:
        raw = section.get(field)
        if field == "version":
            values[field] = _as_int(raw, f"{where}.{field}")
        else:
            values[field] = _as_str(raw, f"{where}.{field}")
    return values


class Defaults(object):
    """Global fallback values from the 'defaults' section"""

    def __init__(
        self,
        duration="",
        version=0,
        ca_crt="",
        ca_key="",
        out_crt="",
        out_key="",
        sign_cmd_post="",
    ):
        self.duration = duration
        self.version = version
        self.ca_crt = ca_crt
        self.ca_key = ca_key
        self.out_crt = out_crt
        self.out_key = out_key
        self.sign_cmd_post = sign_cmd_post

    @classmethod
    def from_dict(cls, section):
        return cls(**_read_overrides(section, "defaults"))

    def normalized(self):
        """Returns a copy with every unset field filled from BUILTIN_DEFAULTS"""
        return Defaults(
            **{
                field: getattr(self, field) or BUILTIN_DEFAULTS[field]
                for field in OVERRIDABLE
            }
        )

    def placeholders(self):
        """Values for the global hook templates"""
        return {"ca_crt": self.ca_crt, "ca_key": self.ca_key}

    def __repr__(self):
        fields = ", ".join(f"{f}={getattr(self, f)!r}" for f in OVERRIDABLE)
        return f"Defaults({fields})"


class GlobalHooks(object):
    """Shell commands run once before and once after the whole batch"""

    def __init__(self, cmd_pre="", cmd_post=""):
        self.cmd_pre = cmd_pre
        self.cmd_post = cmd_post

    @classmethod
    def from_dict(cls, section):
        return cls(
            cmd_pre=_as_str(section.get("cmd_pre"), "global.cmd_pre"),
            cmd_post=_as_str(section.get("cmd_post"), "global.cmd_post"),
        )


class ClientSpec(object):
    """One host to sign, with optional overrides of any Defaults field"""

    def __init__(self, name, ip="", networks=(), groups=(), **overrides):
        unknown = set(overrides) - set(OVERRIDABLE)
        if unknown:
            raise TypeError(f"Unknown client overrides: {sorted(unknown)}")
        self.name = name
        self.ip = ip
        self.networks = list(networks)
        self.groups = list(groups)
        for field in OVERRIDABLE:
            default = 0 if field == "version" else ""
            setattr(self, field, overrides.get(field, default))

    @classmethod
    def from_dict(cls, entry, index):
        where = f"clients[{index}]"
        if not isinstance(entry, dict):
            raise ConfigError(f"{where} must be a mapping, got {entry!r}")
        return cls(
            name=_as_str(entry.get("name"), f"{where}.name"),
            ip=_as_str(entry.get("ip"), f"{where}.ip"),
            networks=_as_list(entry.get("networks"), f"{where}.networks"),
            groups=_as_list(entry.get("groups"), f"{where}.groups"),
            **_read_overrides(entry, where),
        )

    def validate(self):
        if not self.name or not self.networks:
            raise ConfigError(
                f"client name and networks are required: {self!r}",
            )

    def __repr__(self):
        return (
            f"ClientSpec(name={self.name!r}, ip={self.ip!r}, "
            f"networks={self.networks!r}, groups={self.groups!r})"
        )


class RunConfig(object):
    """The whole parsed configuration file"""

    def __init__(self, defaults, global_hooks, clients):
        self.defaults = defaults
        self.global_hooks = global_hooks
        self.clients = list(clients)

    @classmethod
    def from_tree(cls, tree):
        """Builds and validates a RunConfig from a parsed YAML document"""
        if tree is None:
            tree = {}
        if not isinstance(tree, dict):
            raise ConfigError("top level of the config must be a mapping")

        clients = tree.get("clients") or []
        if not isinstance(clients, list):
            raise ConfigError(f"'clients' must be a list, got {clients!r}")

        config = cls(
            defaults=Defaults.from_dict(_section(tree, "defaults")),
            global_hooks=GlobalHooks.from_dict(_section(tree, "global")),
            clients=[
                ClientSpec.from_dict(entry, index)
                for index, entry in enumerate(clients)
            ],
        )
        config.validate()
        return config

    def validate(self):
        if not self.clients:
            raise ConfigError("no clients defined in config")
        for client in self.clients:
            client.validate()


ResolvedClientParams = collections.namedtuple(
    "ResolvedClientParams",
    (
        "name",
        "ip",
        "networks",
        "groups",
        "duration",
        "version",
        "ca_crt",
        "ca_key",
        "out_crt",
        "out_key",
        "sign_cmd_post",
    ),
)


def resolve(defaults, client):
    """Effective settings for one client.

    Each field independently takes the client value if set (non-empty, or
    non-zero for version), else the defaults value, else the builtin. A
    version of 0 therefore always means "unset"."""
    values = {}
    for field in OVERRIDABLE:
        values[field] = (
            getattr(client, field)
            or getattr(defaults, field)
            or BUILTIN_DEFAULTS[field]
        )
    return ResolvedClientParams(
        name=client.name,
        ip=client.ip,
        networks=tuple(client.networks),
        groups=tuple(client.groups),
        **values,
    )
