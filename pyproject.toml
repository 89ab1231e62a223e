[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hevckit"
version = "0.1.0"
description = "Pure-Python HEVC (H.265) bitstream tools: bit reading, NAL unit scanning, Annex B conversion and parsing of shared syntax structures."
requires-python = ">=3.10"
dependencies = []
keywords = ["hevc", "h265", "nal", "bitstream", "video", "annex-b", "exp-golomb"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Video",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hevckit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
