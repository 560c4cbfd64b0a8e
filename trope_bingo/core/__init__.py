"""
Core modules (item loader, card generator, PDF renderer).

Avoid importing heavy dependencies at package import time; import submodules directly:
- `trope_bingo.core.parser`
- `trope_bingo.core.generator`
- `trope_bingo.core.pdf`
"""

__all__ = []
