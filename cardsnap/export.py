from __future__ import annotations

import io
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdf_canvas

from cardkit.cards import Card

EXPORT_FORMATS = ("png", "zip", "pdf")
DEFAULT_FORMAT = "png"
DEFAULT_OUTPUT_DIR = Path("output_cards")
POINTS_PER_PIXEL = 72.0 / 96.0
DEFAULT_SCALE = 2


@dataclass
class ExportOptions:
    source_path: Path
    output_dir: Path = DEFAULT_OUTPUT_DIR
    export_format: str = DEFAULT_FORMAT
    scale: int = 1
    debug: bool = False


def card_filename(index: int) -> str:
    return f"card_{index:02d}.png"


def scale_image(image: Image.Image, scale: int) -> Image.Image:
    if scale == 1:
        return image
    size = (image.width * scale, image.height * scale)
    return image.resize(size, Image.LANCZOS)


def ensure_output_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def build_target_path(base_dir: Path, source: Path, suffix: str = "") -> Path:
    """First free ``<stem>``, ``<stem>_1``, ... entry under ``base_dir``."""
    ensure_output_dir(base_dir)
    stem = source.stem or "cards"
    candidate = base_dir / f"{stem}{suffix}"
    if not candidate.exists():
        return candidate

    counter = 1
    while True:
        candidate = base_dir / f"{stem}_{counter}{suffix}"
        if not candidate.exists():
            return candidate
        counter += 1


def write_png_cards(cards: Sequence[Card], target_directory: Path, scale: int = 1,
                    debug: bool = False) -> List[Path]:
    ensure_output_dir(target_directory)
    output_paths: List[Path] = []
    for index, card in enumerate(cards, start=1):
        output_path = target_directory / card_filename(index)
        scale_image(card.image, scale).save(output_path)
        output_paths.append(output_path)
        if debug:
            print(f"[DEBUG] Saved {output_path}")
    return output_paths


def write_zip_archive(cards: Sequence[Card], archive_path: Path, scale: int = 1,
                      debug: bool = False) -> Path:
    """Bundle the cards as ``<archive stem>/card_NN.png`` entries."""
    ensure_output_dir(archive_path.parent)
    folder = archive_path.stem
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for index, card in enumerate(cards, start=1):
            buffer = io.BytesIO()
            scale_image(card.image, scale).save(buffer, format="PNG")
            archive.writestr(f"{folder}/{card_filename(index)}", buffer.getvalue())
    if debug:
        print(f"[DEBUG] Wrote {len(cards)} cards to {archive_path}")
    return archive_path


def write_pdf(cards: Sequence[Card], pdf_path: Path, scale: int = 1,
             debug: bool = False) -> Path:
    """One card per page, each page sized to its card.

    ``scale`` raises the embedded image resolution, not the page size.
    """
    ensure_output_dir(pdf_path.parent)
    document = pdf_canvas.Canvas(str(pdf_path))
    for card in cards:
        width = card.image.width * POINTS_PER_PIXEL
        height = card.image.height * POINTS_PER_PIXEL
        document.setPageSize((width, height))
        image = ImageReader(scale_image(card.image, scale))
        document.drawImage(image, 0, 0, width=width, height=height)
        document.showPage()
    document.save()
    if debug:
        print(f"[DEBUG] Wrote {len(cards)} cards to {pdf_path}")
    return pdf_path


def export_cards(cards: Sequence[Card], options: ExportOptions) -> List[Path]:
    if not cards:
        raise ValueError("No cards to export.")
    if options.scale < 1:
        raise ValueError(f"Scale must be at least 1, got {options.scale}")
    if options.export_format == "png":
        target = build_target_path(options.output_dir, options.source_path)
        return write_png_cards(cards, target, scale=options.scale, debug=options.debug)
    if options.export_format == "zip":
        target = build_target_path(options.output_dir, options.source_path, ".zip")
        return [write_zip_archive(cards, target, scale=options.scale, debug=options.debug)]
    if options.export_format == "pdf":
        target = build_target_path(options.output_dir, options.source_path, ".pdf")
        return [write_pdf(cards, target, scale=options.scale, debug=options.debug)]
    raise ValueError(
        f"Unsupported export format '{options.export_format}'. "
        f"Use one of {', '.join(EXPORT_FORMATS)}."
    )
