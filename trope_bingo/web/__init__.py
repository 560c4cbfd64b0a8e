"""Flask form that returns a combined PDF of cards."""
