[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tramod"
version = "0.1.0"
description = "Online position trajectory modification under position, velocity and acceleration constraints"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "trajectory",
    "motion control",
    "constraints",
    "quadratic programming",
    "interior point",
    "robotics",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
tramod-demo = "tramod.demo:main"

[tool.hatch.build.targets.wheel]
packages = ["tramod"]

[tool.pytest.ini_options]
addopts = "-ra"
