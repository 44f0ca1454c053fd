[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fractalpaper"
version = "0.2.0"
description = "Generate ultra-wide fractal wallpapers with automatic search for visually rich regions"
requires-python = ">=3.10"
keywords = [
    "fractal",
    "wallpaper",
    "mandelbrot",
    "julia",
    "burning-ship",
    "newton",
    "buddhabrot",
    "flame",
    "attractor",
]
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
    "Topic :: Multimedia :: Graphics",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
fractalpaper = "fractalpaper.cli:main"
fractal-wallpaper = "fractalpaper.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["fractalpaper"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
