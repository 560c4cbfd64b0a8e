from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
import warnings

from tqdm import tqdm

from trope_bingo.config import DEFAULT_BACKGROUND_FILENAME, load_settings
from trope_bingo.core.errors import UniquenessExhausted
from trope_bingo.core.generator import DuplicateAccepted, Outcome, iter_unique_cards
from trope_bingo.core.parser import load_items_file
from trope_bingo.core.pdf import (
    COMBINED_FILENAME,
    CardPageRenderer,
    RenderOptions,
    card_filename,
    write_card_pdf,
)


log = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def _is_duplicate(number: int, outcome: Outcome) -> bool:
    if not isinstance(outcome, DuplicateAccepted):
        return False
    log.warning(
        "Card %02d: no unique card after %d attempts; accepting a duplicate", number, outcome.attempts
    )
    return True


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate unique 5x5 bingo cards as printable PDFs.")
    parser.add_argument("--input", default=None, help="Item list, one item per line (default: source.txt or BINGO_INPUT)")
    parser.add_argument("--output-dir", default=None, help="Where PDFs are written, created if missing (default: output)")
    parser.add_argument(
        "--background",
        default=None,
        help=f"Full-page background image (default: {DEFAULT_BACKGROUND_FILENAME} next to the input file)",
    )
    parser.add_argument("--count", type=int, default=None, help="Number of cards to generate (default: 20)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible cards")
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        help="Draws per card before accepting a duplicate (default: 1000)",
    )
    parser.add_argument("--separate", action="store_true", help="Write one PDF per card instead of one combined PDF")
    parser.add_argument("--show-card-id", action="store_true", help="Print a short card id in each page footer")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: list[str]) -> int:
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    settings = load_settings()
    input_path = Path(args.input).expanduser() if args.input else settings.input_path
    output_dir = Path(args.output_dir).expanduser() if args.output_dir else settings.output_dir
    if args.background:
        background_path = Path(args.background).expanduser()
    else:
        background_path = settings.background_path or input_path.parent / DEFAULT_BACKGROUND_FILENAME
    count = args.count if args.count is not None else settings.card_count
    max_attempts = args.max_attempts if args.max_attempts is not None else settings.max_attempts

    if not input_path.exists():
        raise FileNotFoundError(
            "Input file not found:\n"
            f"  {input_path}\n"
            "\n"
            "Tip: put source.txt in the current folder, or pass --input /path/to/items.txt"
        )

    parsed = load_items_file(input_path)
    for line in parsed.ignored_lines:
        log.info("Ignored line without a label: %r", line)
    log.debug("Loaded %d items; center item is %r", len(parsed.items), parsed.center)

    outcomes = iter_unique_cards(
        parsed.pool,
        parsed.center,
        count,
        seed=args.seed,
        max_attempts_per_card=max_attempts,
    )
    opts = RenderOptions(background_path=background_path, show_card_id=args.show_card_id)

    output_dir.mkdir(parents=True, exist_ok=True)
    print(f"Generating {count} unique bingo cards...")

    duplicates = 0
    progress = tqdm(outcomes, total=count, desc="Cards", unit="card", disable=args.no_progress)

    with warnings.catch_warnings():
        # Duplicates are logged per card by _is_duplicate.
        warnings.simplefilter("ignore", UniquenessExhausted)

        if args.separate:
            for i, outcome in enumerate(progress, start=1):
                if _is_duplicate(i, outcome):
                    duplicates += 1
                path = write_card_pdf(outcome.card, output_dir / card_filename(i), opts, number=i)
                tqdm.write(f"Generated card {i:02d}: {path.name}")
            summary = f"All {count} bingo cards generated in {output_dir}"
        else:
            combined_path = output_dir / COMBINED_FILENAME
            renderer = CardPageRenderer(combined_path, opts)
            for i, outcome in enumerate(progress, start=1):
                if _is_duplicate(i, outcome):
                    duplicates += 1
                renderer.new_page()
                renderer.draw_grid(outcome.card, number=i)
                tqdm.write(f"Added card {i:02d} to combined PDF")
            renderer.finish()
            summary = f"All {count} bingo cards generated in {combined_path}"

    print(summary)
    if duplicates:
        print(f"{duplicates} card(s) repeat an earlier card's items; add more items for a fully unique set.")
    return 0


def run(argv: list[str] | None = None) -> int:
    try:
        return main(sys.argv[1:] if argv is None else argv)
    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        return 130
    except Exception as exc:
        msg = str(exc).rstrip() or repr(exc)
        if "\n" in msg:
            first, rest = msg.split("\n", 1)
            print(f"ERROR: {first}", file=sys.stderr)
            print(rest, file=sys.stderr)
        else:
            print(f"ERROR: {msg}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(run())
