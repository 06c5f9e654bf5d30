[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "krmkit"
version = "0.1.0"
description = "Toolkit for Kubernetes Resource Model objects: metadata helpers, a mockable client, and KRM functions that generate ConfigMaps and Kustomizations."
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["kubernetes", "krm", "kpt", "kustomize", "configmap", "resource-list"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
krm-gen-configmap = "krmkit.genconfigmap:main"
krm-gen-kustomize = "krmkit.kustomize:main"

[tool.hatch.build.targets.wheel]
packages = ["krmkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
