[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ackcore"
version = "0.1.0"
description = "Core types and helpers for Kubernetes controllers that manage AWS resources: API types, conditions, requeue signals, feature gates, comparisons and controller configuration."
requires-python = ">=3.10"
dependencies = []
keywords = ["kubernetes", "controller", "aws", "conditions", "feature-gates", "reconcile"]
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
    "Topic :: Software Development :: Libraries",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ackcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
