[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sstvrx"
version = "0.1.0"
description = "SSTV receiver: FM demodulation, VIS/line/parity sync detection and image decoding from I/Q samples"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "sstv",
    "ham radio",
    "amateur radio",
    "slow-scan television",
    "fm demodulation",
    "iq",
    "bmp",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sstvrx = "sstvrx.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["sstvrx"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
