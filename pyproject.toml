[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gwdat"
version = "0.1.0"
description = "Decoders for game asset data: block-compressed textures, model geometry and materials, text and packed sounds."
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["dxt", "3dc", "texture", "mesh", "vertex-format", "decoder", "game-assets"]
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
    "Topic :: File Formats",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gwdat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
