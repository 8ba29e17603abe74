"""Read, write, compress and inspect datasets in Untitled Data Format files."""

__version__ = "0.1.0"