#!/usr/bin/env python3
"""
Melian Client Setup Script
==========================
Allows installation of the melian client package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # With test dependencies
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="melian-client",
    version="1.0.0",
    description="Python client for the Melian cache server",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "melian=melian.cli:main",
        ],
    },
)
