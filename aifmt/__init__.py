"""Fix and reformat source code with an AI model, from the command line or as a library."""

__version__ = "0.1.0"
__all__ = ["__version__"]