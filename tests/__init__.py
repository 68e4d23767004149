#! /usr/bin/env python
# vim: expandtab shiftwidth=4 softtabstop=4 tabstop=17 filetype=python :
import os
import tempfile
import unittest

import yaml


class WorkdirTestCase(unittest.TestCase):
    """Runs every test inside a fresh temporary working directory, so the
    relative builtin paths (ca.crt, hosts/{{name}}.crt) land there"""

    def setUp(self):
        super(WorkdirTestCase, self).setUp()
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.workdir = tmp.name
        self.addCleanup(os.chdir, os.getcwd())
        os.chdir(self.workdir)

    def touch(self, path, content=""):
        dirname = os.path.dirname(path)
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        with open(path, "w") as f:
            f.write(content)
        return path

    def read(self, path):
        with open(path) as f:
            return f.read()

    def write_config(self, tree, path="config.yml"):
        with open(path, "w") as f:
            yaml.safe_dump(tree, f)
        return path

    def make_ca(self, crt="ca.crt", key="ca.key"):
        self.touch(crt, "ca cert")
        self.touch(key, "ca key")
        os.makedirs("hosts", exist_ok=True)
