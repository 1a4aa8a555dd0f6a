[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ngxmail"
version = "0.1.0"
description = "Core building blocks for a multi-tenant email platform for agents: API keys, encryption, MIME parsing, validation, embeddings, domain records and transaction helpers."
requires-python = ">=3.10"
keywords = [
    "email",
    "mime",
    "api-keys",
    "aes-gcm",
    "embeddings",
    "pagination",
    "validation",
    "multi-tenant",
    "row-level-security",
]
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
    "Topic :: Communications :: Email",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "cryptography>=41",
    "httpx>=0.25",
    "numpy>=1.24",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
]

[tool.hatch.build.targets.wheel]
packages = ["ngxmail"]

[tool.hatch.build.targets.sdist]
include = [
    "ngxmail",
    "tests",
    "pyproject.toml",
    "README.md",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
no_implicit_optional = true
