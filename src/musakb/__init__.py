"""musakb - semantic knowledge base for the MusaDSL ecosystem."""

__version__ = "0.1.0"
