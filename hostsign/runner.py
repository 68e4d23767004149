#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Running hooks and the external signer.

Children inherit stdout and stderr, so their output shows up live. Nothing
is captured, and there is no timeout or retry."""

import logging
import shlex
import subprocess

from hostsign import BatchSignError

LOG = logging.getLogger(name="hostsign.runner")

NEBULA_CERT = "nebula-cert"


class CommandError(BatchSignError):
    """A hook or the signer failed to start or exited unsuccessfully"""

    def __init__(self, label, returncode=None, reason=None):
        self.label = label
        self.returncode = returncode
        if reason is None:
            if returncode is not None and returncode < 0:
                reason = f"killed by signal {-returncode}"
            else:
                reason = f"exit status {returncode}"
        self.reason = reason
        super().__init__(f"{label}: {reason}")


def describe(command):
    if isinstance(command, str):
        return command
    return " ".join(shlex.quote(str(arg)) for arg in command)


def run_command(command, stdin=None):
    """Run command and wait for it.

    A string goes through the shell, a sequence is executed directly. stdin
    is written to the child's standard input when given. Raises CommandError
    unless the child exits 0."""
    shell = isinstance(command, str)
    label = describe(command) if shell else str(command[0])
    try:
        process = subprocess.run(
            command,
            shell=shell,
            input=stdin,
            text=True,
        )
    except OSError as exc:
        raise CommandError(label, reason=f"could not start: {exc}") from exc
    if process.returncode != 0:
        raise CommandError(label, process.returncode)


class Signer(object):
    """Produces a certificate and key for one resolved client"""

    def sign(self, params):
        raise NotImplementedError


class NebulaCertSigner(Signer):
    """Signs by running 'nebula-cert sign' with the CA passphrase on stdin"""

    def __init__(self, passphrase="", binary=NEBULA_CERT, runner=run_command):
        self._passphrase = passphrase
        self.binary = binary
        self.runner = runner

    def build_args(self, params):
        args = [
            self.binary,
            "sign",
            "-name", params.name,
            "-ip", params.ip,
            "-duration", params.duration,
            "-ca-crt", params.ca_crt,
            "-ca-key", params.ca_key,
            "-out-crt", params.out_crt,
            "-out-key", params.out_key,
            "-version", str(params.version),
        ]
        if params.networks:
            args += ["-networks", ",".join(params.networks)]
        if params.groups:
            args += ["-groups", ",".join(params.groups)]
        return args

    def sign(self, params):
        args = self.build_args(params)
        LOG.debug("Running %s", describe(args))
        self.runner(args, stdin=self._passphrase + "\n")

    def __repr__(self):
        return f"NebulaCertSigner(binary={self.binary!r})"
