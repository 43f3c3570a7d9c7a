"""Nagios-compatible CPU used and iowait check based on sar."""

from codecs import open
from os import path

from setuptools import setup

here = path.abspath(path.dirname(__file__))

with open(path.join(here, "README.rst"), encoding="utf-8") as f:
    long_description = f.read()

test_deps = [
    "pytest>=3",
]

setup(
    name="fc.check-cpu",
    version="1.0",
    description=__doc__,
    long_description=long_description,
    url="https://github.com/flyingcircusio/fc-nixos",
    author="Flying Circus Internet Operations GmbH",
    author_email="mail@flyingcircus.io",
    license="ZPL",
    classifiers=[
        "Environment :: Console",
        "License :: OSI Approved :: Zope Public License",
        "Programming Language :: Python :: 3.10",
        "Topic :: System :: Monitoring",
    ],
    packages=["fc.check_cpu"],
    install_requires=["nagiosplugin"],
    zip_safe=False,
    tests_require=test_deps,
    extras_require={"test": test_deps},
    entry_points={
        "console_scripts": [
            "check_cpu=fc.check_cpu.cpu:main",
        ],
    },
)
