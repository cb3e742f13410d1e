[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dtnbundle"
version = "0.1.0"
description = "Bundle Protocol version 7 bundles: CBOR encoding, decoding, fragmentation and reassembly"
requires-python = ">=3.10"
dependencies = []
keywords = ["dtn", "bundle-protocol", "bpv7", "cbor", "delay-tolerant-networking"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dtnbundle"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
