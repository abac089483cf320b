#!/usr/bin/env python
"""
seasontri installation.
"""
import pathlib
from setuptools import setup, find_packages

NAME = "seasontri"
DESCRIPTION = "Seasonality-Adjusted Loss Development for Quarterly Triangles"
URL = "https://github.com/seasontri/seasontri"
LICENSE = "MIT"
BASE_DIR = pathlib.Path(__file__).parent.resolve()
LONG_DESCRIPTION = (BASE_DIR / "README.md").read_text(encoding="utf-8")
VERSION = (BASE_DIR / "VERSION").read_text(encoding="utf-8").strip()
REQUIREMENTS = (BASE_DIR / "requirements.txt").read_text(encoding="utf-8").split()



setup(
    name=NAME,
    version=VERSION,
    license=LICENSE,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    url=URL,
    packages=find_packages(include=["seasontri", "seasontri.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3 :: Only",
        "License :: OSI Approved :: MIT License",
        "Topic :: Scientific/Engineering :: Mathematics",
        "Operating System :: OS Independent",
        ],
    keywords=[
        "actuarial reserving chainladder seasonality quarterly insurance",
        ],
    install_requires=REQUIREMENTS,
    extras_require={"test": ["pytest"]},
    package_data={"seasontri": ["datasets/*.csv"]},
    include_package_data=True,
    )
