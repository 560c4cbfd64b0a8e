from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
import logging
from pathlib import Path
from typing import BinaryIO, Iterable, Union

from reportlab.lib.pagesizes import LETTER
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from PIL import Image

from .generator import CENTER_CELL, GRID_SIZE, Card


log = logging.getLogger(__name__)

COMBINED_FILENAME = "bingo-cards.pdf"


@dataclass(frozen=True)
class RenderOptions:
    background_path: Path | None = None
    page_size: tuple[float, float] = LETTER
    margin: float = 10
    border: float = 20
    # Pushes the grid below the title area printed on the background.
    vertical_offset: float = 88
    font_name: str = "Helvetica-Bold"
    font_size: float = 11
    leading_ratio: float = 1.15
    padding: float = 5
    center_shade_gray: float = 0.5
    center_shade_alpha: float = 0.1
    show_card_id: bool = False


def card_filename(index: int) -> str:
    return f"bingo-card-{index:02d}.pdf"


def _load_background(path: Path) -> ImageReader:
    img = Image.open(path).convert("RGBA")
    bg = Image.new("RGBA", img.size, (255, 255, 255, 255))
    bg.alpha_composite(img)
    return ImageReader(bg.convert("RGB"))


def _ellipsize(text: str, *, w: float, font_name: str, font_size: float) -> str:
    while text and stringWidth(text + "…", font_name, font_size) > w:
        text = text[:-1]
    return (text.rstrip() + "…") if text else "…"


def _fit_lines(text: str, *, w: float, h: float, font_name: str, font_size: float, leading: float) -> list[str]:
    # simpleSplit keeps a token wider than the cell on one line; cut it.
    lines = [
        line if stringWidth(line, font_name, font_size) <= w
        else _ellipsize(line, w=w, font_name=font_name, font_size=font_size)
        for line in simpleSplit(text, font_name, font_size, w)
    ]
    max_lines = max(1, int(h // leading))
    if len(lines) <= max_lines:
        return lines

    lines = lines[:max_lines]
    if not lines[-1].endswith("…"):
        lines[-1] = _ellipsize(lines[-1], w=w, font_name=font_name, font_size=font_size)
    return lines


def _draw_centered_text(
    canvas: Canvas,
    text: str,
    *,
    x: float,
    y: float,
    w: float,
    h: float,
    font_name: str,
    font_size: float,
    leading_ratio: float,
) -> None:
    line_height = font_size * leading_ratio
    lines = _fit_lines(text, w=w, h=h, font_name=font_name, font_size=font_size, leading=line_height)
    if not lines:
        return

    canvas.setFont(font_name, font_size)
    total_h = len(lines) * line_height
    start_y = y + (h - total_h) / 2 + (total_h - line_height)  # top line baseline
    for i, line in enumerate(lines):
        canvas.drawCentredString(x + w / 2, start_y - i * line_height, line)


class CardPageRenderer:
    """Draws one card per page onto a reportlab canvas.

    ``target`` is a filename or a writable binary stream. Call ``new_page``
    (implicit on the first ``draw_grid``), ``draw_grid`` for each card and
    ``finish`` once to write the document.
    """

    def __init__(self, target: Union[str, Path, BinaryIO], opts: RenderOptions) -> None:
        self.opts = opts
        if isinstance(target, Path):
            target = str(target)
        self._canvas = Canvas(target, pagesize=opts.page_size)
        self._page_open = False
        self.pages = 0

        self._background: ImageReader | None = None
        path = opts.background_path
        if path and path.exists():
            try:
                self._background = _load_background(path)
            except OSError as exc:
                log.warning("Ignoring unreadable background image %s: %s", path, exc)
        elif path:
            log.debug("No background image at %s", path)

    def new_page(self) -> None:
        if self._page_open:
            self._canvas.showPage()
        self._page_open = True
        self.pages += 1

        if self._background is not None:
            page_w, page_h = self.opts.page_size
            self._canvas.drawImage(self._background, 0, 0, width=page_w, height=page_h)

    def draw_grid(self, card: Card, number: int | None = None) -> None:
        """Draw ``card`` on the current page.

        ``number`` labels the footer; it defaults to the page count of this
        document.
        """
        if not self._page_open:
            self.new_page()

        canvas = self._canvas
        opts = self.opts
        page_w, page_h = opts.page_size

        grid_size = min(page_w - 2 * opts.border, page_h - 2 * opts.border)
        cell = grid_size / GRID_SIZE
        start_x = (page_w - grid_size) / 2
        grid_top = page_h - ((page_h - grid_size) / 2 + opts.vertical_offset)

        canvas.setStrokeColorRGB(0, 0, 0)
        canvas.setLineWidth(1)

        for row, labels in enumerate(card.grid):
            for col, text in enumerate(labels):
                cx = start_x + col * cell
                cy = grid_top - (row + 1) * cell  # top row first

                if (row, col) == CENTER_CELL:
                    canvas.saveState()
                    canvas.setFillGray(opts.center_shade_gray)
                    canvas.setFillAlpha(opts.center_shade_alpha)
                    canvas.rect(cx, cy, cell, cell, stroke=0, fill=1)
                    canvas.restoreState()

                canvas.rect(cx, cy, cell, cell, stroke=1, fill=0)

                canvas.setFillColorRGB(0, 0, 0)
                _draw_centered_text(
                    canvas,
                    text,
                    x=cx + opts.padding,
                    y=cy + opts.padding,
                    w=cell - 2 * opts.padding,
                    h=cell - 2 * opts.padding,
                    font_name=opts.font_name,
                    font_size=opts.font_size,
                    leading_ratio=opts.leading_ratio,
                )

        if opts.show_card_id:
            label = self.pages if number is None else number
            canvas.setFont("Helvetica", 8)
            canvas.drawRightString(page_w - opts.margin, opts.margin, f"Card {label:02d} • {card.card_id}")

    def finish(self) -> None:
        if self._page_open:
            self._canvas.showPage()
            self._page_open = False
        self._canvas.save()


def render_cards_pdf(cards: Iterable[Card], opts: RenderOptions) -> bytes:
    buf = BytesIO()
    renderer = CardPageRenderer(buf, opts)
    for card in cards:
        renderer.new_page()
        renderer.draw_grid(card)
    renderer.finish()
    return buf.getvalue()


def write_combined_pdf(
    cards: Iterable[Card],
    output_dir: Path,
    opts: RenderOptions,
    filename: str = COMBINED_FILENAME,
) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / filename
    path.write_bytes(render_cards_pdf(cards, opts))
    return path


def write_card_pdf(card: Card, path: Path, opts: RenderOptions, number: int = 1) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    renderer = CardPageRenderer(path, opts)
    renderer.draw_grid(card, number=number)
    renderer.finish()
    return path


def write_card_pdfs(cards: Iterable[Card], output_dir: Path, opts: RenderOptions) -> list[Path]:
    return [
        write_card_pdf(card, output_dir / card_filename(i), opts, number=i)
        for i, card in enumerate(cards, start=1)
    ]
