#!/bin/env python3
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Generate Nebula host certificates for every client in the configuration."""

import argparse
import logging
import sys

from hostsign import config
from hostsign.batch import BatchRun
from hostsign.runner import NebulaCertSigner

LOG = logging.getLogger(name="hostsign.batchsign")


def cmdline(argv=None):
    """Parse commandline."""
    parser = argparse.ArgumentParser(description=__doc__)

    config.add_config_argument(parser)
    config.add_nebula_cert_argument(parser)
    config.add_logging_config_argument(parser)
    config.add_verbosity_argument(parser)

    args = parser.parse_args(argv)
    return args


def error_out(message):
    """Log error message and exit with failure code."""
    LOG.error(message)
    sys.exit(1)


def main(argv=None):
    """Entrypoint of application."""
    args = cmdline(argv)

    config.setup_logging(config.get_logging_config(args))
    config.configure_log_level(args)

    signer = NebulaCertSigner(
        passphrase=config.get_ca_passphrase(),
        binary=config.get_nebula_cert(args),
    )
    run = BatchRun(config.get_config_path(args), signer=signer)
    result = run.execute()
    if not result.ok:
        error_out(result.message)


if __name__ == "__main__":
    main()
