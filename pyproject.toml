[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mongomodel"
version = "0.1.0"
description = "Declarative MongoDB model configuration: concern and index parsing, collection naming and index synchronization."
requires-python = ">=3.10"
dependencies = [
    "pymongo",
]
keywords = ["mongodb", "odm", "model", "indexes", "read-concern", "write-concern"]
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
    "Topic :: Database :: Front-Ends",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mongomodel"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
