[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "oapistore"
version = "0.1.0"
description = "An in-memory pet store served over WSGI, a bearer-token scope checker with a things store, and a resolver for OpenAPI code generator configuration."
requires-python = ">=3.10"
keywords = ["openapi", "wsgi", "petstore", "api", "configuration", "bearer", "yaml"]
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
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]
dependencies = [
    "pyyaml>=6.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[project.scripts]
oapistore-server = "oapistore.web:main"
oapistore-config = "oapistore.settings:main"

[tool.hatch.build.targets.wheel]
packages = ["oapistore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
