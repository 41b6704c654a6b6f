[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "vulnreach"
version = "0.1.0"
description = "OSV vulnerability records, per-package and per-symbol lookup, and import/call witness search over dependency graphs"
requires-python = ">=3.10"
dependencies = []
keywords = ["vulnerability", "osv", "security", "call graph", "import graph", "file url"]
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
    "Topic :: Security",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["vulnreach"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.mypy]
python_version = "3.10"

[tool.ruff]
line-length = 100
target-version = "py310"
