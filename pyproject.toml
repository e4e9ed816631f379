[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "imagealbum"
version = "0.1.0"
description = "Desktop photo album that finds large images on a drive and lets you adjust, save or delete them"
requires-python = ">=3.10"
dependencies = [
    "numpy",
    "pillow",
]
keywords = ["photo", "album", "image", "viewer", "thumbnails", "image-adjustment"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: X11 Applications",
    "Environment :: Win32 (MS Windows)",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Viewers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
imagealbum = "imagealbum.gui:main"

[tool.hatch.build.targets.wheel]
packages = ["imagealbum"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
