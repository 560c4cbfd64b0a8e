"""Generate unique 5x5 bingo cards from a list of items and print them as PDFs."""

__version__ = "0.1.0"
