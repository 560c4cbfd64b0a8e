from trope_bingo.cli import run

raise SystemExit(run())
