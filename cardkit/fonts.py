from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import requests
from PIL import ImageFont

from .typography import BASE_FONT_SIZE, DEFAULT_TYPOGRAPHY, Typography


DEFAULT_FONT_FILENAME = "LXGWWenKaiLite-Bold.ttf"
DEFAULT_FONT_URL = (
    "https://github.com/lxgw/LxgwWenKai-Lite/releases/download/v1.330/"
    f"{DEFAULT_FONT_FILENAME}"
)
DEFAULT_FONT_SHA256 = (
    "25a4d0e009f330481a299f0c09cd63ef1a3ab284e142236f6d3f4cd7ff7a37d3"
)
FONT_WEIGHT_NAMES = {
    100: "Thin",
    200: "ExtraLight",
    300: "Light",
    400: "Regular",
    500: "Medium",
    600: "SemiBold",
    700: "Bold",
    800: "ExtraBold",
    900: "Black",
}
# Other CJK families tried after the configured one.
SYSTEM_FONT_PATTERNS = (
    "NotoSansCJK*.otf",
    "NotoSansCJK*.ttc",
    "SourceHanSansSC-*.otf",
    "SourceHanSansSC-*.ttc",
    "SourceHanSans*.otf",
    "SourceHanSans*.ttc",
    "思源黑体*.otf",
    "思源黑体*.ttc",
)
# Stroke width per pixel of font size used to fake a bold face.
FAUX_BOLD_RATIO = 1 / 28


def family_font_patterns(family: str, weight: int) -> List[str]:
    """File-name globs for ``family``, the exact ``weight`` first."""
    stem = family.replace(" ", "")
    patterns = []
    weight_name = FONT_WEIGHT_NAMES.get(weight)
    if weight_name:
        patterns.append(f"{stem}-{weight_name}.*")
    patterns.extend([f"{stem}-*.otf", f"{stem}-*.ttf", f"{stem}-*.ttc"])
    return patterns


def _resources_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "resources" / "fonts"


def _download_default_font(target: Path, debug: bool = False) -> None:
    if debug:
        print(f"[DEBUG] Downloading default font to {target}")
    target.parent.mkdir(parents=True, exist_ok=True)
    response = requests.get(DEFAULT_FONT_URL, timeout=60)
    response.raise_for_status()
    data = response.content
    digest = hashlib.sha256(data).hexdigest()
    if digest != DEFAULT_FONT_SHA256:
        raise RuntimeError(
            "Default font checksum mismatch; the download may be incomplete."
        )
    target.write_bytes(data)


def ensure_default_font(debug: bool = False) -> Optional[Path]:
    target = _resources_dir() / DEFAULT_FONT_FILENAME
    if target.exists():
        return target
    try:
        _download_default_font(target, debug=debug)
    except (requests.RequestException, RuntimeError, OSError) as exc:
        if debug:
            print(f"[DEBUG] Failed to download default font: {exc}")
        return None
    return target


def _system_font_dirs() -> List[Path]:
    search_dirs: List[Path] = []
    windir = os.environ.get("WINDIR")
    if windir:
        search_dirs.append(Path(windir) / "Fonts")
    search_dirs.extend(
        [
            Path("/System/Library/Fonts"),
            Path("/Library/Fonts"),
            Path("/System/Library/Fonts/Supplemental"),
            Path("/usr/share/fonts"),
            Path("/usr/local/share/fonts"),
        ]
    )
    return search_dirs


def _candidate_font_paths(
    explicit: Optional[Path] = None,
    download: bool = True,
    debug: bool = False,
    typography: Typography = DEFAULT_TYPOGRAPHY,
) -> Iterator[Path]:
    if explicit:
        yield explicit.resolve()
        return

    patterns = family_font_patterns(typography.font_family, typography.font_weight)
    patterns.extend(SYSTEM_FONT_PATTERNS)
    seen: set[Path] = set()
    for directory in _system_font_dirs():
        if not directory.exists():
            continue
        for pattern in patterns:
            for path in directory.rglob(pattern):
                if path not in seen:
                    seen.add(path)
                    yield path

    if download:
        default_font = ensure_default_font(debug=debug)
        if default_font:
            yield default_font


def _truetype(path: Path, size: int, index: int) -> ImageFont.FreeTypeFont:
    font_kwargs = {"index": index}
    layout_engine = getattr(ImageFont, "LAYOUT_BASIC", None)
    if layout_engine is not None:
        font_kwargs["layout_engine"] = layout_engine
    return ImageFont.truetype(str(path), size, **font_kwargs)


def load_font(
    font_path: Optional[Path],
    font_size: int,
    font_index: int = 0,
    download: bool = True,
    debug: bool = False,
    typography: Typography = DEFAULT_TYPOGRAPHY,
) -> ImageFont.FreeTypeFont:
    """Load the first usable font, ending with Pillow's built-in face.

    Measuring against the built-in face is an accepted degradation: pages
    still fit, they just use a different typeface than intended.
    """
    candidates = _candidate_font_paths(font_path, download=download, debug=debug,
                                       typography=typography)
    for candidate in candidates:
        try:
            return _truetype(candidate, font_size, font_index)
        except OSError:
            if debug:
                print(f"[DEBUG] Could not open font {candidate}")
            continue

    if debug:
        print("[DEBUG] Falling back to Pillow's built-in font")
    return builtin_font(font_size)


def builtin_font(font_size: int) -> ImageFont.FreeTypeFont:
    font = ImageFont.load_default(size=font_size)
    if not isinstance(font, ImageFont.FreeTypeFont):
        raise RuntimeError(
            "No scalable font available. Install Pillow with FreeType support "
            "or pass --font with a TrueType/OpenType file."
        )
    return font


@dataclass
class FontFaces:
    """Regular and bold faces, with a per-size variant cache.

    Without a bold file, bold runs use the regular face and are drawn with a
    stroke. Glyph advances are unchanged by the stroke, so measured widths
    stay identical to drawn widths.
    """

    regular: ImageFont.FreeTypeFont
    bold: Optional[ImageFont.FreeTypeFont] = None
    _variants: Dict[Tuple[bool, float], ImageFont.FreeTypeFont] = field(
        default_factory=dict, init=False, repr=False
    )

    @property
    def faux_bold(self) -> bool:
        return self.bold is None

    def face(self, bold: bool, size: float) -> ImageFont.FreeTypeFont:
        key = (bold and not self.faux_bold, size)
        cached = self._variants.get(key)
        if cached is None:
            base = self.bold if key[0] else self.regular
            cached = base.font_variant(size=size)
            self._variants[key] = cached
        return cached

    def stroke_width(self, bold: bool, size: float) -> int:
        if not bold or not self.faux_bold:
            return 0
        return max(1, round(size * FAUX_BOLD_RATIO))

    @classmethod
    def builtin(cls, size: int) -> "FontFaces":
        return cls(regular=builtin_font(size))


def load_font_faces(
    font_path: Optional[Path] = None,
    bold_font_path: Optional[Path] = None,
    font_size: int = BASE_FONT_SIZE,
    font_index: int = 0,
    download: bool = True,
    debug: bool = False,
    typography: Typography = DEFAULT_TYPOGRAPHY,
) -> FontFaces:
    regular = load_font(font_path, font_size, font_index, download=download, debug=debug,
                        typography=typography)
    bold = None
    if bold_font_path is not None:
        try:
            bold = _truetype(bold_font_path.resolve(), font_size, font_index)
        except OSError as exc:
            if debug:
                print(f"[DEBUG] Bold font unusable, using faux bold: {exc}")
    return FontFaces(regular=regular, bold=bold)
