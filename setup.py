from setuptools import setup, find_packages

requires = [
    "pyramid",
    "PyYAML >= 5.1",
    # Transient dependency from pyramid->webob,
    # should be fixed in a later release of webob
    "legacy-cgi; python_version >= '3.13'"
]

setup(
    name="hostsign",
    version="0.3.0",
    python_requires=">=3.7",
    description="hostsign",
    long_description="""
hostsign batch-generates host certificates for a Nebula mesh network.

It reads a YAML roster of clients, resolves each client's settings against
the global defaults and runs nebula-cert once per client, with the CA
passphrase piped on standard input. Shell hooks can run before the batch,
after every signed client and after the whole batch.

The run stops at the first failure; there is no retry and no parallel
signing.
      """,
    classifiers=[
        "Programming Language :: Python",
        "Environment :: Console",
        "Topic :: Security :: Cryptography",
        "Topic :: System :: Networking",
    ],
    keywords="nebula certificates ca cert overlay mesh vpn",
    packages=find_packages(exclude=["tests"]),
    include_package_data=True,
    zip_safe=False,
    test_suite="tests",
    install_requires=requires,
    extras_require={"testing": ["pytest"]},
    entry_points="""\
      [console_scripts]
      hostsign = hostsign.scripts.batchsign:main
      """,
)
