#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""hostsign batch-signs Nebula host certificates from a YAML client roster"""

__version__ = "0.3.0"


class BatchSignError(Exception):
    """Base for every error that aborts a signing run"""
