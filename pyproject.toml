[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "laminar_synth"
version = "0.4.0"
description = "Synthetic asset protocol: collateralised minting, redeeming and liquidation of synthetic tokens against liquidity pools"
requires-python = ">=3.10"
dependencies = []
keywords = ["synthetic assets", "collateral", "liquidity pool", "fixed point", "defi"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["laminar_synth"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
