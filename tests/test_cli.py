"""End-to-end CLI runs with Pillow's built-in font (no font download)."""

import zipfile

import pytest
from PIL import Image

import cardsnap.cli as cli
from cardkit.fonts import FontFaces
from cardkit.typography import CARD_SIZE


@pytest.fixture(autouse=True)
def builtin_fonts(monkeypatch):
    monkeypatch.setattr(cli, "load_font_faces", lambda **kwargs: FontFaces.builtin(28))


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text(
        "**Intro**\n" + "A sentence that keeps going. " * 30 + "\n- first\n- second\n",
        encoding="utf-8",
    )
    return path


def test_png_run_writes_numbered_cards(tmp_path, source, capsys):
    out = tmp_path / "out"
    assert cli.main(["--input", str(source), "--output-dir", str(out),
                     "--container-height", "300"]) == 0
    written = sorted(path.name for path in (out / "notes").iterdir())
    assert len(written) > 1
    assert written[0] == "card_01.png"
    assert "Generated %d cards" % len(written) in capsys.readouterr().out


def test_zip_run_with_cover(tmp_path, source):
    out = tmp_path / "out"
    cli.main(["--input", str(source), "--output-dir", str(out), "--format", "zip",
              "--title", "Notes", "--theme", "beige"])
    with zipfile.ZipFile(out / "notes.zip") as archive:
        names = archive.namelist()
    assert names[0] == "notes/card_01.png"
    assert len(names) >= 2


def test_missing_input_exits(tmp_path):
    with pytest.raises(SystemExit):
        cli.main(["--input", str(tmp_path / "missing.md")])


def test_blank_input_exits(tmp_path):
    path = tmp_path / "blank.md"
    path.write_text("\n  \n", encoding="utf-8")
    with pytest.raises(SystemExit, match="No text content"):
        cli.main(["--input", str(path), "--output-dir", str(tmp_path / "out")])


@pytest.mark.parametrize(
    "extra",
    [
        ["--theme", "purple"],
        ["--custom-theme", "#fff"],
        ["--min-font-size", "40"],
        ["--font-step", "0"],
        ["--container-height", "-5"],
        ["--interval", "0"],
        ["--scale", "0"],
    ],
)
def test_bad_options_exit(tmp_path, source, extra):
    with pytest.raises(SystemExit):
        cli.main(["--input", str(source), "--output-dir", str(tmp_path / "out")] + extra)


def test_watch_renders_then_stops_on_interrupt(tmp_path, source, monkeypatch):
    calls = []

    def fake_sleep(seconds):
        calls.append(seconds)
        if len(calls) > 1:
            raise KeyboardInterrupt

    monkeypatch.setattr(cli.time, "sleep", fake_sleep)
    out = tmp_path / "out"
    assert cli.main(["--input", str(source), "--output-dir", str(out), "--watch",
                     "--interval", "0.01"]) == 0
    assert (out / "notes" / "card_01.png").exists()


def test_bare_title_flag_adds_untitled_cover(tmp_path, source):
    args = cli.parse_args(["--input", str(source), "--title"])
    assert args.title == ""
    out = tmp_path / "out"
    cli.main(["--input", str(source), "--output-dir", str(out), "--format", "zip",
              "--scale", "1", "--title"])
    cli.main(["--input", str(source), "--output-dir", str(out), "--format", "zip",
              "--scale", "1"])
    with zipfile.ZipFile(out / "notes.zip") as with_cover, \
            zipfile.ZipFile(out / "notes_1.zip") as without_cover:
        assert len(with_cover.namelist()) == len(without_cover.namelist()) + 1


def test_default_scale_doubles_card_pixels(tmp_path, source):
    out = tmp_path / "out"
    cli.main(["--input", str(source), "--output-dir", str(out)])
    with Image.open(out / "notes" / "card_01.png") as image:
        assert image.size == (CARD_SIZE[0] * 2, CARD_SIZE[1] * 2)


def test_watch_survives_input_replaced_mid_read(tmp_path, source, monkeypatch):
    real_render = cli.render_once
    renders = []

    def flaky_render(*args):
        renders.append(args)
        if len(renders) == 1:
            raise FileNotFoundError(str(source))
        return real_render(*args)

    sleeps = []

    def fake_sleep(seconds):
        sleeps.append(seconds)
        if len(sleeps) > 2:
            raise KeyboardInterrupt

    monkeypatch.setattr(cli, "render_once", flaky_render)
    monkeypatch.setattr(cli.time, "sleep", fake_sleep)
    out = tmp_path / "out"
    assert cli.main(["--input", str(source), "--output-dir", str(out), "--watch",
                     "--interval", "0.01"]) == 0
    assert len(renders) == 2
    assert (out / "notes" / "card_01.png").exists()
