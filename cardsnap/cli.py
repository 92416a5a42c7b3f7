from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import List, Optional

from cardkit import cards as card_builder
from cardkit import typography
from cardkit.fonts import load_font_faces
from cardkit.measure import MeasurementOracle
from cardkit.runs import LatestRunGate
from cardkit.themes import DEFAULT_THEME_ID, THEMES, Theme, parse_custom_theme, resolve_theme
from cardsnap import export


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="cardsnap",
        description="Split a text or lightweight Markdown document into image cards.",
    )
    parser.add_argument(
        "--input",
        type=Path,
        required=True,
        help="Path to the source text file (supports **bold** and '- ' lists).",
    )
    parser.add_argument(
        "--title",
        type=str,
        nargs="?",
        const="",
        help="Add a cover card carrying this title (bare --title gives an UNTITLED cover).",
    )
    parser.add_argument(
        "--theme",
        type=str,
        default=DEFAULT_THEME_ID,
        help=f"Preset theme: {', '.join(THEMES)} (default: {DEFAULT_THEME_ID}).",
    )
    parser.add_argument(
        "--custom-theme",
        type=str,
        help="Custom gradient 'C1,C2[,ANGLE]' in hex, overriding --theme.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=export.DEFAULT_OUTPUT_DIR,
        help="Directory where generated cards will be written (default: output_cards).",
    )
    parser.add_argument(
        "--format",
        choices=export.EXPORT_FORMATS,
        default=export.DEFAULT_FORMAT,
        help="png: one file per card (default); zip: single archive; pdf: one card per page.",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=export.DEFAULT_SCALE,
        help=f"Pixel scale of exported cards (default: {export.DEFAULT_SCALE}).",
    )
    parser.add_argument(
        "--font",
        type=Path,
        help="Path to a TrueType/OpenType font file to use when rendering text.",
    )
    parser.add_argument(
        "--bold-font",
        type=Path,
        help="Font file for **bold** runs (default: stroke the regular face).",
    )
    parser.add_argument(
        "--font-index",
        type=int,
        default=0,
        help="Font face index when loading from TTC collections (default: 0).",
    )
    parser.add_argument(
        "--container-height",
        type=float,
        help="Override the body height in pixels (default: measured from the card chrome).",
    )
    parser.add_argument(
        "--font-size",
        type=int,
        default=typography.BASE_FONT_SIZE,
        help=f"Default body font size in pixels (default: {typography.BASE_FONT_SIZE}).",
    )
    parser.add_argument(
        "--min-font-size",
        type=int,
        default=typography.MIN_FONT_SIZE,
        help=f"Smallest size auto-shrink may use (default: {typography.MIN_FONT_SIZE}).",
    )
    parser.add_argument(
        "--font-step",
        type=int,
        default=typography.FONT_SIZE_STEP,
        help=f"Auto-shrink step in pixels (default: {typography.FONT_SIZE_STEP}).",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=typography.OVERFLOW_TOLERANCE,
        help=(
            "Largest overflow fraction rescued by shrinking instead of splitting "
            f"(default: {typography.OVERFLOW_TOLERANCE})."
        ),
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Regenerate the cards whenever the input file changes.",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=0.5,
        help="Polling and debounce interval in seconds for --watch (default: 0.5).",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging.",
    )
    return parser.parse_args(argv)


def _resolve_theme(args: argparse.Namespace) -> Theme:
    try:
        if args.custom_theme:
            return parse_custom_theme(args.custom_theme)
        return resolve_theme(args.theme)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc


def _build_policy(args: argparse.Namespace) -> typography.ShrinkPolicy:
    try:
        return typography.ShrinkPolicy(
            default_size=args.font_size,
            step=args.font_step,
            min_size=args.min_font_size,
            tolerance=args.tolerance,
        )
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc


def build_oracle(args: argparse.Namespace, policy: typography.ShrinkPolicy) -> MeasurementOracle:
    profile = typography.Typography(font_size=policy.default_size)
    faces = load_font_faces(
        font_path=args.font,
        bold_font_path=args.bold_font,
        font_size=policy.default_size,
        font_index=args.font_index,
        debug=args.debug,
        typography=profile,
    )
    return MeasurementOracle(faces, typography.CONTENT_WIDTH, profile)


def render_once(
    args: argparse.Namespace,
    oracle: MeasurementOracle,
    theme: Theme,
    policy: typography.ShrinkPolicy,
) -> List[card_builder.Card]:
    text = args.input.read_text(encoding="utf-8")
    try:
        return card_builder.build_cards(
            text,
            theme,
            oracle,
            title=args.title,
            container_height=args.container_height,
            policy=policy,
            debug=args.debug,
        )
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc


def _export(args: argparse.Namespace, cards: List[card_builder.Card]) -> List[Path]:
    options = export.ExportOptions(
        source_path=args.input,
        output_dir=args.output_dir,
        export_format=args.format,
        scale=args.scale,
        debug=args.debug,
    )
    return export.export_cards(cards, options)


def _report(args: argparse.Namespace, generated: List[Path], card_count: int) -> None:
    location = generated[0].parent if args.format == "png" else generated[0]
    print(f"Generated {card_count} cards in {location.resolve()}")


def _mtime(path: Path) -> Optional[float]:
    try:
        return path.stat().st_mtime
    except FileNotFoundError:
        return None


def watch(args: argparse.Namespace, oracle: MeasurementOracle, theme: Theme,
          policy: typography.ShrinkPolicy) -> int:
    gate = LatestRunGate()
    last_rendered: Optional[float] = None
    print(f"Watching {args.input} (Ctrl+C to stop)")
    try:
        while True:
            seen = _mtime(args.input)
            if seen is None or seen == last_rendered:
                time.sleep(args.interval)
                continue
            # Debounce: wait until the file stops changing.
            time.sleep(args.interval)
            if _mtime(args.input) != seen:
                continue

            token = gate.begin()
            try:
                cards = render_once(args, oracle, theme, policy)
            except FileNotFoundError:
                # Replaced between the mtime check and the read; retry.
                if args.debug:
                    print(f"[DEBUG] {args.input} vanished before it could be read")
                continue
            if _mtime(args.input) != seen:
                gate.begin()
                if args.debug:
                    print("[DEBUG] Input changed during run; discarding stale cards")
            if gate.publish(token, cards):
                last_rendered = seen
                if cards:
                    _report(args, _export(args, cards), len(cards))
                else:
                    print("No text content found; nothing to export.")
    except KeyboardInterrupt:
        return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if not args.input.exists():
        raise SystemExit(f"Input file not found: {args.input}")
    if args.interval <= 0:
        raise SystemExit("--interval must be positive.")
    if args.scale < 1:
        raise SystemExit("--scale must be at least 1.")

    theme = _resolve_theme(args)
    policy = _build_policy(args)
    oracle = build_oracle(args, policy)

    if args.watch:
        return watch(args, oracle, theme, policy)

    cards = render_once(args, oracle, theme, policy)
    if not cards:
        raise SystemExit("No text content found in the input.")
    _report(args, _export(args, cards), len(cards))
    return 0
