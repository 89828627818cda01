import io
import os
import re

from setuptools import find_packages, setup


with io.open("flask_stepwizard/__init__.py", "rt", encoding="utf8") as f:
    version = re.search(r"__version__ = \"(.*?)\"", f.read()).group(1)


def fpath(name):
    return os.path.join(os.path.dirname(__file__), name)


def read(fname):
    with io.open(fpath(fname), "rt", encoding="utf8") as f:
        return f.read()


def desc():
    return read("README.rst")


setup(
    name="Flask-StepWizard",
    version=version,
    license="BSD",
    author="Flask-StepWizard contributors",
    description=(
        "Multi-step form wizard engine: schema-per-step validation with a"
        " single accumulated record, plus Flask JSON and terminal front ends."
    ),
    long_description=desc(),
    long_description_content_type="text/x-rst",
    packages=find_packages(exclude=["tests*"]),
    entry_points={
        "console_scripts": ["stepwizard = flask_stepwizard.cli:cli"],
    },
    include_package_data=True,
    zip_safe=False,
    platforms="any",
    install_requires=[
        "click>=8, <9",
        "email_validator>=1.0.5",
        "Flask>=2, <4",
        "marshmallow>=3.18.0, <5",
        "WTForms>=3, <4",
        "werkzeug<4",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Web Environment",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.8",
)
