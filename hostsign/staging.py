#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Input checks and cleanup done before a client is signed.

nebula-cert refuses to overwrite an existing certificate or key, so stale
output from an earlier run has to go first."""

import logging
import os

from hostsign import BatchSignError
from hostsign.templating import apply_placeholders

LOG = logging.getLogger(name="hostsign.staging")


class MissingInputError(BatchSignError):
    """CA certificate or key is not on disk"""


class StagingError(BatchSignError):
    """A stale output file could not be removed"""


def require_file(path, what):
    if not os.path.exists(path):
        raise MissingInputError(f"{what} file {path} does not exist")


def remove_stale(path):
    """Remove path if present. Returns True when something was deleted."""
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        LOG.warning("Could not remove %s: %s", path, exc)
        raise StagingError(f"failed to remove stale file {path}: {exc}") from exc
    LOG.debug("Removed stale %s", path)
    return True


def stage_files(params):
    """Checks CA material and clears old output for one resolved client.

    Returns the concrete (out_crt, out_key) paths. Nothing is deleted unless
    both CA files exist."""
    require_file(params.ca_crt, "CA crt")
    require_file(params.ca_key, "CA key")

    placeholders = {"name": params.name}
    out_crt = apply_placeholders(params.out_crt, placeholders)
    out_key = apply_placeholders(params.out_key, placeholders)

    for path in (out_crt, out_key):
        remove_stale(path)
    return out_crt, out_key
