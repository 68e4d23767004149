#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
"""Substitution of {{key}} placeholders in paths and hook commands.

Recognized keys per call site:
    name            output path templates, per-client sign_cmd_post
    ca_crt, ca_key  global cmd_pre and cmd_post
"""

import re


def placeholder(key):
    return "{{" + key + "}}"


def apply_placeholders(template, values):
    """Replace every {{key}} in template with values[key].

    All keys are matched in one pass, so a replacement value is inserted as
    is and never scanned again. Placeholders without a key in values are left
    alone."""
    if not values:
        return template
    pattern = re.compile("|".join(re.escape(placeholder(k)) for k in values))
    return pattern.sub(lambda match: str(values[match.group(0)[2:-2]]), template)
