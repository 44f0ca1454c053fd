"""Fractal wallpaper generator: parameter search, computation, colouring and a command line."""

__version__ = "0.2.0"