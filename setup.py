#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Setup script for the ESG engine

Installs the ``esg_engine`` package and the ``esg-engine`` console command.
"""

from pathlib import Path

from setuptools import find_packages, setup

VERSION = "1.0.0"

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")
else:
    long_description = "GHG accounting and ESG target-tracking engine"

setup(
    name="esg-engine",
    version=VERSION,
    description="Three-scope GHG accounting, reduction target tracking and ESG benchmarking",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["esg_engine", "esg_engine.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "prometheus-client>=0.17",
        "typer>=0.9",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "esg-engine=esg_engine.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering",
    ],
)
