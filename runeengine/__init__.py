"""A layered game engine: events, layers, cameras, profiling, logging and an OpenGL renderer."""

__version__ = "0.1.0"