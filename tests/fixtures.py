#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
import os

from hostsign.runner import CommandError, Signer


class FakeSigner(Signer):
    """Records what it was asked to sign and writes dummy output files"""

    def __init__(self, fail_for=()):
        self.signed = []
        self.outputs_present = []
        self.fail_for = set(fail_for)

    def sign(self, params):
        self.outputs_present.append(
            os.path.exists(params.out_crt) or os.path.exists(params.out_key)
        )
        self.signed.append(params)
        if params.name in self.fail_for:
            raise CommandError("nebula-cert", 1)
        for path in (params.out_crt, params.out_key):
            with open(path, "w") as f:
                f.write(params.name)

    @property
    def names(self):
        return [params.name for params in self.signed]


class RecordingRunner(object):
    """Stands in for run_command; fails for commands listed in fail_on"""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def __call__(self, command, stdin=None):
        self.calls.append((command, stdin))
        if isinstance(command, str) and command in self.fail_on:
            raise CommandError(str(command), 2)

    @property
    def commands(self):
        return [command for command, _ in self.calls]


def client(name, networks=("10.0.0.0/24",), **extra):
    entry = {"name": name, "networks": list(networks)}
    entry.update(extra)
    return entry


def config_tree(*clients, defaults=None, hooks=None):
    tree = {"clients": list(clients)}
    if defaults is not None:
        tree["defaults"] = defaults
    if hooks is not None:
        tree["global"] = hooks
    return tree
