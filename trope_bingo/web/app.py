from __future__ import annotations

import os
from pathlib import Path

from flask import Flask, Response, flash, redirect, render_template_string, request

from trope_bingo.core.errors import ValidationError
from trope_bingo.core.generator import generate_unique_set
from trope_bingo.core.parser import load_items
from trope_bingo.core.pdf import COMBINED_FILENAME, RenderOptions, render_cards_pdf


APP_DIR = Path(__file__).resolve().parent.parent.parent
ASSETS_DIR = APP_DIR / "assets"
DEFAULT_BACKGROUND_PATHS = [ASSETS_DIR / "Background.png", ASSETS_DIR / "background.png"]
MAX_CARDS = 500


def _find_background() -> Path | None:
    for path in DEFAULT_BACKGROUND_PATHS:
        if path.exists():
            return path
    return None


HTML = """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>Trope Bingo</title>
    <style>
      body { font-family: system-ui, -apple-system, Segoe UI, Roboto, sans-serif; margin: 24px; max-width: 920px; }
      h1 { margin: 0 0 8px; }
      .hint { color: #333; margin: 0 0 16px; }
      label { display: block; font-weight: 600; margin: 12px 0 6px; }
      input[type="number"], textarea { width: 100%; padding: 10px; border: 1px solid #111; border-radius: 6px; }
      textarea { min-height: 260px; font-family: ui-monospace, SFMono-Regular, Menlo, Monaco, Consolas, monospace; }
      .row { display: grid; grid-template-columns: 1fr 1fr; gap: 12px; }
      .btn { margin-top: 14px; padding: 10px 14px; border: 2px solid #111; border-radius: 10px; background: #fff; font-weight: 700; cursor: pointer; }
      .box { border: 2px solid #111; border-radius: 12px; padding: 14px; }
      .flash { margin: 10px 0; padding: 10px 12px; border: 1px solid #111; border-radius: 8px; }
      .small { font-size: 12px; color: #333; }
    </style>
  </head>
  <body>
    <h1>Trope Bingo</h1>
    <p class="hint">Paste/upload your item list (one per line, the first item is the center square) and generate a single PDF of unique cards.</p>

    {% with messages = get_flashed_messages() %}
      {% if messages %}
        {% for msg in messages %}
          <div class="flash">{{ msg }}</div>
        {% endfor %}
      {% endif %}
    {% endwith %}

    <form class="box" method="post" action="/generate" enctype="multipart/form-data">
      <div class="row">
        <div>
          <label>Number of cards</label>
          <input type="number" name="count" value="{{ default_count }}" min="1" max="{{ max_cards }}" step="1" required>
          <div class="small">Each page is one Letter-size card.</div>
        </div>
        <div>
          <label>Seed (optional, for reproducible PDFs)</label>
          <input type="number" name="seed" placeholder="e.g. 12345">
        </div>
      </div>

      <label>Item list file (optional)</label>
      <input type="file" name="file" accept=".txt,text/plain">
      <div class="small">If provided, this overrides the pasted text.</div>

      <label>Item list (plain text, at least 25 lines)</label>
      <textarea name="items" placeholder="1. Snowstorm&#10;2. Small town&#10;3. Meet-cute"></textarea>

      <button class="btn" type="submit">Generate PDF</button>
    </form>

  </body>
</html>
"""


app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")


@app.get("/")
def index() -> str:
    return render_template_string(HTML, default_count=20, max_cards=MAX_CARDS)


@app.post("/generate")
def generate() -> Response:
    count_raw = (request.form.get("count") or "20").strip()
    seed_raw = (request.form.get("seed") or "").strip()

    try:
        count = int(count_raw)
    except ValueError:
        flash("Number of cards must be a whole number.")
        return redirect("/")
    if not 1 <= count <= MAX_CARDS:
        flash(f"Number of cards must be between 1 and {MAX_CARDS}.")
        return redirect("/")

    seed = None
    if seed_raw:
        try:
            seed = int(seed_raw)
        except ValueError:
            flash("Seed must be a whole number.")
            return redirect("/")

    text = (request.form.get("items") or "").strip()
    uploaded = request.files.get("file")
    if uploaded and uploaded.filename:
        try:
            text = uploaded.read().decode("utf-8")
        except UnicodeDecodeError:
            flash("Unable to read uploaded file as UTF-8 text.")
            return redirect("/")

    if not text.strip():
        flash("Provide an item list (paste text or upload a .txt file).")
        return redirect("/")

    try:
        parsed = load_items(text)
        cards = generate_unique_set(parsed.pool, parsed.center, count, seed=seed)
    except ValidationError as e:
        flash(str(e))
        return redirect("/")

    opts = RenderOptions(background_path=_find_background(), show_card_id=True)
    pdf_bytes = render_cards_pdf(cards, opts)

    return Response(
        pdf_bytes,
        mimetype="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{COMBINED_FILENAME}"'},
    )


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5000, debug=True)
