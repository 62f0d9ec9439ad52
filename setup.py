#!/usr/bin/env python
# -*- encoding: utf-8 -*-

"""Setup Module for the BlogApp service"""

from glob import glob
from os.path import basename, splitext

from setuptools import find_packages, setup

sqlite_requires = ["sqlalchemy>=2.0"]
postgresql_requires = ["psycopg2>=2.9.9", "sqlalchemy>=2.0"]
flask_requires = ["flask>=2.2"]
marshmallow_requires = ["marshmallow>=3.15.0"]
cli_requires = ["typer>=0.9.0", "rich>=13.0.0", "typing_extensions>=4.0"]

install_requires = (
    marshmallow_requires
    + flask_requires
    + sqlite_requires
    + cli_requires
    + [
        "bleach>=4.1.0",
        "inflection>=0.5.1",
        "werkzeug>=2.0.0",
    ]
)

testing_requires = [
    "mock==5.1.0",
    "nox>=2023.4.22",
    "pytest-cov>=4.1.0",
    "pytest-mock>=3.12.0",
    "pytest>=7.4.3",
]

dev_requires = testing_requires + [
    "black>=23.11.0",
    "isort>=5.12.0",
    "pre-commit>=2.16.0",
]

setup(
    name="blogapp",
    version="0.1.0",
    license="BSD 3-Clause License",
    description="Posts and Comments, with cascading deletes, served over HTTP",
    packages=find_packages("src"),
    package_dir={"": "src"},
    py_modules=[splitext(basename(path))[0] for path in glob("src/*.py")],
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.11",
    classifiers=[
        "Development Status :: 2 - Pre-Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3 :: Only",
        "Framework :: Flask",
    ],
    keywords=["blog", "posts", "comments", "flask", "sqlalchemy"],
    install_requires=install_requires,
    extras_require={
        "postgresql": postgresql_requires,
        "test": testing_requires,
        "tests": testing_requires,
        "dev": dev_requires,
    },
    entry_points={"console_scripts": ["blogapp = blogapp.cli:app"]},
)
