[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hashtab"
version = "0.1.0"
description = "Compute, verify and export file checksums in common sumfile formats"
requires-python = ">=3.10"
dependencies = []
keywords = ["checksum", "hash", "sumfile", "sfv", "md5", "sha256", "verification"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
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
hashtab = "hashtab.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["hashtab"]

[tool.pytest.ini_options]
addopts = "-ra"
