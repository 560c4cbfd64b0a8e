from __future__ import annotations


class ValidationError(ValueError):
    """Input cannot produce a valid card set; nothing has been generated or written."""


class UniquenessExhausted(RuntimeWarning):
    """A card was accepted even though its item set repeats an earlier card."""
