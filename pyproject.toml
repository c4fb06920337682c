[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "statusblocks"
version = "0.1.0"
description = "Modular status bar feed for dwm: runs block commands and sets their joined output as the X root window name"
requires-python = ">=3.10"
dependencies = []
keywords = ["dwm", "statusbar", "x11", "blocks", "window-manager"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: X11 Applications",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Desktop Environment :: Window Managers :: Applets",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
statusblocks = "statusblocks.main:main"

[tool.hatch.build.targets.wheel]
packages = ["statusblocks"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
