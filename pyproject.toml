[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bmpstash"
version = "1.0.0"
description = "Store arbitrary files inside 24-bit BMP images and recover them again"
requires-python = ">=3.10"
dependencies = []
keywords = ["bmp", "bitmap", "encoding", "chunking", "files"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bmpstash = "bmpstash.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["bmpstash"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
