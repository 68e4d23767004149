#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""hostsign.config collects the commandline, environment and logging setup
used by the hostsign scripts, and loads the YAML run configuration"""

import argparse
import logging
import os
from logging.config import dictConfig

import pyramid.paster as paster
import yaml

from hostsign.models import ConfigError, RunConfig

LOG = logging.getLogger(name="hostsign.config")

DEFAULT_CONFIG_PATH = "config.yml"
PASSPHRASE_ENV = "NEBULA_CA_PASSPHRASE"
ENV_PREFIX = "HOSTSIGN_"

LOG_LEVEL = {
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

DEFAULT_LOGGING_CONFIG = {
    "version": 1,
    "formatters": {
        "generic": {
            "format": "%(asctime)s %(levelname)-5.5s [%(name)s] %(message)s"
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "level": "NOTSET",
            "formatter": "generic",
        },
    },
    "loggers": {
        "": {  # root logger
            "handlers": ["console"],
            "level": "INFO",
        },
        "hostsign": {
            "level": "DEBUG",
            "qualname": "hostsign",
        },
    },
}


def add_config_argument(parser):
    """Adds the path to the clients configuration file, accepting the single
    dash '-config' spelling as well"""
    parser.add_argument(
        "-c",
        "-config",
        "--config",
        help=f"Path to clients configuration file (default {DEFAULT_CONFIG_PATH})",
        dest="config",
        type=str,
    )


def add_nebula_cert_argument(parser):
    """Adds an argument for the signer binary to a given parser"""
    parser.add_argument(
        "--nebula-cert",
        help="Path or name of the nebula-cert binary",
        dest="nebula_cert",
        type=str,
    )


def add_logging_config_argument(parser):
    """Adds an argument for an .ini-file with logging sections"""
    parser.add_argument(
        "--logging-config",
        help="Path to an .ini-file with [loggers], [handlers] and [formatters]",
        dest="logging_config",
        type=str,
    )


def add_verbosity_argument(parser):
    """Adds an argument for verbosity to a given parser, counting the amount of
    'v's and 'verbose' on the commandline"""
    parser.add_argument(
        "-v",
        "--verbose",
        help="Verbosity of root logger, increasing the more 'v's are added",
        action="count",
        default=0,
    )


def _get_config_value(
    arguments: argparse.Namespace,
    variable,
    required=False,
    default=None,
    env=None,
):
    """Returns what value to use for a given config variable, prefer argument >
    env-variable, if a value cant be found default is returned"""
    if env is None:
        env = os.environ
    env_var = ENV_PREFIX + variable.upper().replace("-", "_")
    result = env.get(env_var)

    arg_value = getattr(arguments, variable, None)
    if arg_value is not None:
        result = arg_value

    if result is None:
        result = default

    if required and result is None:
        raise ValueError(
            f"No {variable} could be found as either an argument"
            f" or in the environment variable {env_var}",
            variable,
            env_var,
        )
    return result


def get_config_path(arguments, env=None):
    """Returns the clients configuration file to read"""
    return _get_config_value(
        arguments, "config", default=DEFAULT_CONFIG_PATH, env=env
    )


def get_nebula_cert(arguments, env=None):
    """Returns the signer binary to invoke"""
    return _get_config_value(arguments, "nebula_cert", default="nebula-cert", env=env)


def get_logging_config(arguments, env=None):
    """Returns the logging .ini-file to use, or None for the built-in setup"""
    return _get_config_value(arguments, "logging_config", env=env)


def get_ca_passphrase(env=None):
    """Reads the CA passphrase once. Unset means an unencrypted CA key."""
    if env is None:
        env = os.environ
    passphrase = env.get(PASSPHRASE_ENV)
    if passphrase is None:
        LOG.info("%s is not set, using an empty passphrase", PASSPHRASE_ENV)
        passphrase = ""
    return passphrase


def get_log_level(argument_level, logger=None, env=None):
    """Calculates the highest verbosity(here inverted) from the argument,
    environment and root, capping it to between logging.DEBUG(10)-logging.ERROR(40),
    returning the log level"""

    if env is None:
        env = os.environ
    env_level_name = env.get(ENV_PREFIX + "LOG_LEVEL", "ERROR").upper()
    env_level = LOG_LEVEL.get(env_level_name, logging.ERROR)

    if logger is None:
        logger = logging.getLogger()
    current_level = logger.level

    argument_verbosity = logging.ERROR - argument_level * 10  # level steps are 10
    verbosity = min(argument_verbosity, env_level, current_level)
    log_level = (
        verbosity if logging.DEBUG <= verbosity <= logging.ERROR else logging.ERROR
    )
    return log_level


def configure_log_level(arguments: argparse.Namespace, logger=None):
    """Sets the root loggers level to the highest verbosity from the argument,
    environment and logging config"""
    if logger is None:
        logger = logging.getLogger()
    logger.setLevel(get_log_level(arguments.verbose, logger))


def setup_logging(config_path=None):
    """wrapper for pyramid.paster.setup_logging using file at config_path, if
    no config_path is passed on use dictionary DEFAULT_LOGGING_CONFIG"""
    if config_path:
        paster.setup_logging(config_path)
    else:
        dictConfig(DEFAULT_LOGGING_CONFIG)


def load_run_config(path):
    """Reads and validates the YAML clients configuration at path"""
    try:
        with open(path, "rb") as f:
            tree = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"failed to read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc

    LOG.debug("Loaded %s", path)
    return RunConfig.from_tree(tree)
