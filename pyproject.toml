[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "oddkit"
version = "0.1.0"
description = "Small command-line tools: a toy word machine, a tape image maker, a fortune picker, grep, split, csplit and a pty relay"
requires-python = ">=3.10"
dependencies = []
keywords = ["emulator", "split", "csplit", "grep", "fortune", "tape", "pty"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
oddkit-eniac = "oddkit.eniac:main"
oddkit-mktape = "oddkit.mktape:main"
oddkit-cookie = "oddkit.cookie:main"
oddkit-grep = "oddkit.grep:main"
oddkit-csplit = "oddkit.csplit:main"
oddkit-split = "oddkit.split:main"
oddkit-pty = "oddkit.ptyrelay:main"

[tool.setuptools.packages.find]
include = ["oddkit*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
