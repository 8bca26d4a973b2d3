[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "muonfit"
version = "0.1.0"
description = "Fit muon decay-time spectra with exponential models and extract lifetimes"
requires-python = ">=3.10"
keywords = ["muon", "lifetime", "fit", "histogram", "physics", "likelihood"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
]
dependencies = [
    "numpy",
    "scipy",
    "matplotlib",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
muonfit = "muonfit.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["muonfit"]

[tool.pytest.ini_options]
addopts = "-ra"
