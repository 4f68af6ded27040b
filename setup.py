import os
import re
import sys
from setuptools import setup, find_packages


SETUP_DIR = os.path.dirname(os.path.realpath(__file__))
OPTIONSET_INIT = os.path.join(SETUP_DIR, "optionset", "__init__.py")


def optionset_version() -> str:
    with open(OPTIONSET_INIT, "r") as f:
        for line in f:
            m = re.match(r"\s*__version__\s*=\s*[\"']([^\"']+)[\"']\s*$", line)
            if m:
                return m[1]
    sys.stderr.write(f"Error: __version__ not found in {OPTIONSET_INIT}\n\n")
    sys.exit(1)


CONSOLE_SCRIPTS = [
    "optionset = optionset.__main__:main",
]

setup(
    name="optionset",
    description="Typed bitmasks (option sets) and a generator for declaring them",
    version=optionset_version(),
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "black>=22.1.0",
        "pygments>=2.7.3",
    ],
    extras_require={
        "dev": ["black>=22.1.0", "mypy", "pytest", "flake8"]
    },
    entry_points={
        "console_scripts": CONSOLE_SCRIPTS
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Utilities"
    ]
)
