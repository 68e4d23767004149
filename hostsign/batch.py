#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""The signing run, as a fixed sequence of steps.

    load -> normalize -> global pre-hook -> clients -> global post-hook -> done

Every client goes through resolve -> stage -> sign -> post-sign hook before
the next one starts. Each step yields a StepResult and the run stops at the
first failure. Clients signed before that keep their files on disk."""

import logging

from hostsign import BatchSignError
from hostsign.config import load_run_config
from hostsign.models import resolve
from hostsign.runner import NebulaCertSigner, run_command
from hostsign.staging import stage_files
from hostsign.templating import apply_placeholders

LOG = logging.getLogger(name="hostsign.batch")

SUCCESS_MESSAGE = "✔ All certificates generated successfully"


class StepResult(object):
    """Outcome of one step: ok, or the step label and the error that
    stopped it"""

    def __init__(self, step, error=None):
        self.step = step
        self.error = error

    @property
    def ok(self):
        return self.error is None

    @property
    def message(self):
        if self.ok:
            return f"{self.step}: ok"
        return f"{self.step} failed: {self.error}"

    def __repr__(self):
        return f"StepResult({self.step!r}, error={self.error!r})"


def attempt(step, func, *args):
    """Calls func, turning a BatchSignError into a failed StepResult.

    Returns (result, value returned by func)."""
    try:
        value = func(*args)
    except BatchSignError as exc:
        return StepResult(step, exc), None
    return StepResult(step), value


class BatchRun(object):
    """One pass over the clients configuration at config_path"""

    def __init__(self, config_path, signer=None, runner=run_command):
        self.config_path = config_path
        self.signer = signer if signer is not None else NebulaCertSigner()
        self.runner = runner
        self.config = None
        self.defaults = None

    def execute(self):
        """Runs every step in order and returns the first failed StepResult,
        or a successful 'done' result"""
        for step in (
            self.load,
            self.normalize,
            self.global_pre,
            self.sign_clients,
            self.global_post,
        ):
            result = step()
            if not result.ok:
                LOG.debug("Stopping: %s", result.message)
                return result
        print(SUCCESS_MESSAGE)
        return StepResult("done")

    def load(self):
        result, self.config = attempt("load", load_run_config, self.config_path)
        if result.ok:
            LOG.info(
                "Loaded %d client(s) from %s",
                len(self.config.clients),
                self.config_path,
            )
        return result

    def normalize(self):
        self.defaults = self.config.defaults.normalized()
        return StepResult("normalize")

    def _hook(self, step, template, placeholders):
        if not template:
            return StepResult(step)
        command = apply_placeholders(template, placeholders)
        LOG.info("Running %s: %s", step, command)
        result, _ = attempt(step, self.runner, command)
        return result

    def global_pre(self):
        return self._hook(
            "cmd_pre",
            self.config.global_hooks.cmd_pre,
            self.defaults.placeholders(),
        )

    def global_post(self):
        return self._hook(
            "cmd_post",
            self.config.global_hooks.cmd_post,
            self.defaults.placeholders(),
        )

    def sign_clients(self):
        for client in self.config.clients:
            result = self.sign_client(client)
            if not result.ok:
                return result
        return StepResult("clients")

    def sign_client(self, client):
        label = f"client {client.name}"

        result, _ = attempt(f"{label}: validate", client.validate)
        if not result.ok:
            return result

        params = resolve(self.defaults, client)
        result, paths = attempt(f"{label}: stage", stage_files, params)
        if not result.ok:
            return result
        params = params._replace(out_crt=paths[0], out_key=paths[1])

        print(f"→ Generating cert for {client.name}")
        result, _ = attempt(f"{label}: sign", self.signer.sign, params)
        if not result.ok:
            return result

        return self._hook(
            f"{label}: sign_cmd_post",
            params.sign_cmd_post,
            {"name": client.name},
        )
