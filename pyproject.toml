[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "chwire"
version = "0.1.0"
description = "Native-protocol building blocks for ClickHouse clients: column codecs, data blocks, LZ4 and CityHash"
requires-python = ">=3.10"
dependencies = []
keywords = ["clickhouse", "database", "protocol", "lz4", "cityhash", "columnar"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["chwire"]

[tool.pytest.ini_options]
addopts = "-ra"
