#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import os
from pathlib import Path
from setuptools import find_packages, setup

HERE = Path(os.path.abspath(__file__)).resolve().parent
README = (HERE / "readme.md").read_text()

setup(
    name="lncluster",
    version="0.1.0",
    description="Spawn throwaway, fully peered LND regtest clusters for integration tests.",
    long_description=README,
    long_description_content_type="text/markdown",
    license="Apache-2.0",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    keywords="lightning, lnd, bitcoin, regtest, docker, testing",
    python_requires=">=3.10",
    package_dir={"": "src/cli"},
    packages=find_packages("src/cli"),
    include_package_data=True,
    install_requires=[
        "click>=8.1,<9",
        "docker>=7.0",
        "requests>=2.31",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["lncluster=lncluster.cli:cli"]},
)
