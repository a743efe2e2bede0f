[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mlpart"
version = "0.1.0"
description = "Graph partitioning building blocks: bisection, FM refinement and multi-constraint greedy k-way refinement"
requires-python = ">=3.10"
dependencies = []
keywords = ["graph", "partitioning", "bisection", "refinement", "fiduccia-mattheyses"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mlpart"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
