"""Export of rendered cards as PNG files, a ZIP archive or a PDF."""

import zipfile
from pathlib import Path

import pytest
from PIL import Image

from cardkit.cards import Card
from cardsnap.export import (
    ExportOptions,
    build_target_path,
    card_filename,
    export_cards,
)


@pytest.fixture
def cards():
    colors = ["red", "green", "blue"]
    return [
        Card(name=f"page_{n:02d}", image=Image.new("RGB", (60, 80), color))
        for n, color in enumerate(colors, start=1)
    ]


def test_card_filename_is_zero_padded():
    assert card_filename(3) == "card_03.png"
    assert card_filename(12) == "card_12.png"


def test_target_path_skips_existing_entries(tmp_path):
    source = Path("notes.md")
    first = build_target_path(tmp_path, source)
    assert first == tmp_path / "notes"
    first.mkdir()
    assert build_target_path(tmp_path, source) == tmp_path / "notes_1"
    (tmp_path / "notes.zip").write_bytes(b"")
    assert build_target_path(tmp_path, source, ".zip") == tmp_path / "notes_1.zip"


def test_png_export_writes_one_file_per_card(tmp_path, cards):
    options = ExportOptions(source_path=Path("doc.txt"), output_dir=tmp_path)
    paths = export_cards(cards, options)
    assert [path.name for path in paths] == ["card_01.png", "card_02.png", "card_03.png"]
    assert all(path.parent == tmp_path / "doc" for path in paths)
    with Image.open(paths[1]) as image:
        assert image.size == (60, 80)
        assert image.convert("RGB").getpixel((0, 0)) == (0, 128, 0)


def test_zip_export_nests_cards_in_a_folder(tmp_path, cards):
    options = ExportOptions(source_path=Path("doc.txt"), output_dir=tmp_path,
                            export_format="zip")
    (archive_path,) = export_cards(cards, options)
    assert archive_path == tmp_path / "doc.zip"
    with zipfile.ZipFile(archive_path) as archive:
        assert archive.namelist() == ["doc/card_01.png", "doc/card_02.png",
                                      "doc/card_03.png"]


def test_pdf_export_writes_a_pdf(tmp_path, cards):
    options = ExportOptions(source_path=Path("doc.txt"), output_dir=tmp_path,
                            export_format="pdf")
    (pdf_path,) = export_cards(cards, options)
    data = pdf_path.read_bytes()
    assert data.startswith(b"%PDF")


def test_export_rejects_empty_and_unknown_format(tmp_path, cards):
    with pytest.raises(ValueError):
        export_cards([], ExportOptions(source_path=Path("doc.txt"), output_dir=tmp_path))
    with pytest.raises(ValueError):
        export_cards(cards, ExportOptions(source_path=Path("doc.txt"), output_dir=tmp_path,
                                          export_format="gif"))


def test_scale_multiplies_exported_pixels(tmp_path, cards):
    options = ExportOptions(source_path=Path("doc.txt"), output_dir=tmp_path, scale=2)
    paths = export_cards(cards, options)
    with Image.open(paths[0]) as image:
        assert image.size == (120, 160)
    assert cards[0].image.size == (60, 80)


def test_scale_below_one_is_rejected(tmp_path, cards):
    with pytest.raises(ValueError):
        export_cards(cards, ExportOptions(source_path=Path("doc.txt"), output_dir=tmp_path,
                                          scale=0))
