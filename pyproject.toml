[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "layertwo"
version = "0.1.0"
description = "Building blocks of an MPEG Audio Layer II encoder: bitstream writing, CRCs, hearing thresholds, quantisation and bit allocation"
requires-python = ">=3.10"
dependencies = []
keywords = ["mpeg", "audio", "layer2", "mp2", "encoder", "bit-allocation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Multimedia :: Sound/Audio :: Conversion",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["layertwo"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
