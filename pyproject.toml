[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "leggedtraj"
version = "0.1.0"
description = "Spline-based building blocks for legged-robot trajectory optimization: node variables, phase timings, terrain, gaits, dynamics and constraints."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "trajectory optimization",
    "legged robots",
    "splines",
    "hermite",
    "nonlinear programming",
    "robotics",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["leggedtraj"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
