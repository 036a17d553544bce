[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mimicry"
version = "0.1.0"
description = "Tempo-synced multi-tap delay with per-tap phase-vocoder pitch shifting"
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["audio", "delay", "pitch-shift", "phase-vocoder", "dsp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mimicry"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
