from automagik_forge.version import __version__

__all__ = ["__version__"]
