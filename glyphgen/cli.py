#!/usr/bin/env python3
# glyphgen/cli.py
"""
Entry point for glyphgen.
Loads configuration, applies command-line overrides, and either renders once
to stdout (--print) or runs the interactive preview.
"""

import argparse
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from glyphgen.capabilities import detect_capabilities
from glyphgen.config import GRADIENTS, Config
from glyphgen.dispatcher import RenderDispatcher, RenderFailure
from glyphgen.image import is_supported_format, open_image, supported_extensions
from glyphgen.logging_conf import setup_logging
from glyphgen.rendering.renderer import EngineKind
from glyphgen.rendering.text_mode import UnicodeStyle
from glyphgen.rendering.unicode_mode import UnicodeMode
from glyphgen.version import version_info

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="glyphgen",
        description="Turn images into ASCII or Unicode art and text into styled Unicode.",
    )
    p.add_argument("image", nargs="?", help=f"image file ({', '.join(supported_extensions())})")
    p.add_argument("-t", "--text", help="text to stylize")
    p.add_argument("-E", "--engine", choices=[k.value for k in EngineKind])
    p.add_argument("-w", "--width", type=int, help="output width in columns")
    p.add_argument("--charset", choices=("standard", "extended", "blocks", "custom"))
    p.add_argument("--custom-charset", help="glyphs for --charset custom, dark to light")
    p.add_argument("--invert", action="store_true", default=None)
    p.add_argument("--edges", action="store_true", default=None, help="Sobel edge enhancement")
    p.add_argument("--mode", choices=[m.value for m in UnicodeMode])
    p.add_argument("--color-depth", choices=("none", "16", "256", "truecolor"))
    p.add_argument("--threshold", type=float, help="braille dot threshold in [0, 1]")
    p.add_argument("--dither", action="store_true", default=None, help="ordered dithering for braille")
    p.add_argument("--style", choices=[s.value for s in UnicodeStyle])
    p.add_argument("--gradient", choices=GRADIENTS)
    p.add_argument("--colors", nargs="+", metavar="HEX", help="gradient colors: start end, or a cycle")
    p.add_argument("--print", dest="print_once", action="store_true", help="render once to stdout and exit")
    p.add_argument("--config", help="config file (default: $GLYPHGEN_CONFIG or per-user)")
    p.add_argument("--log-level", choices=("DEBUG", "INFO", "WARNING", "ERROR"))
    p.add_argument("-V", "--version", action="version", version=version_info())
    return p


def overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """Partial config holding only the options given on the command line."""
    partial: Dict[str, Dict[str, Any]] = {"app": {}, "ascii": {}, "unicode": {}, "text": {}}
    if args.engine:
        partial["app"]["engine"] = args.engine
    elif args.text is not None and not args.image:
        partial["app"]["engine"] = "text"
    if args.width is not None:
        partial["ascii"]["width"] = args.width
        partial["unicode"]["width"] = args.width
    if args.charset:
        partial["ascii"]["charset"] = args.charset
    if args.custom_charset is not None:
        partial["ascii"]["custom_charset"] = args.custom_charset
    if args.invert is not None:
        partial["ascii"]["invert"] = True
    if args.edges is not None:
        partial["ascii"]["edge_enhance"] = True
    if args.mode:
        partial["unicode"]["mode"] = args.mode
    if args.color_depth:
        partial["unicode"]["color_depth"] = args.color_depth
        partial["text"]["color_depth"] = args.color_depth
    if args.threshold is not None:
        partial["unicode"]["braille_threshold"] = args.threshold
    if args.dither is not None:
        partial["unicode"]["dither"] = True
    if args.style:
        partial["text"]["style"] = args.style
    if args.gradient:
        partial["text"]["gradient"] = args.gradient
    if args.colors:
        partial["text"]["start_color"] = args.colors[0]
        partial["text"]["end_color"] = args.colors[-1]
        partial["text"]["palette"] = list(args.colors)
    return {k: v for k, v in partial.items() if v}


def render_once(cfg: Config, payload, engine: EngineKind, out=None, err=None) -> int:
    """Render through the dispatcher, write the result, return the exit status."""
    out = out or sys.stdout
    err = err or sys.stderr
    if engine == EngineKind.ASCII:
        config = cfg.ascii_config()
    elif engine == EngineKind.UNICODE:
        config = cfg.unicode_config()
    else:
        config = cfg.text_config()

    with RenderDispatcher(detect_capabilities()) as dispatcher:
        request = dispatcher.submit(payload, config)
        while True:
            result = dispatcher.get_result()
            if result is not None and result.sequence == request.sequence:
                break

    if isinstance(result, RenderFailure):
        err.write(f"glyphgen: {result.kind.value}: {result.message}\n")
        return 1
    out.write(result.output)
    out.write("\n")
    log.info("%s render took %.1f ms", engine.value, result.elapsed_ms)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = Config.load(args.config, create_if_missing=not args.print_once)
    setup_logging(cfg, args.log_level)

    overrides = overrides_from_args(args)
    if overrides:
        cfg.update(overrides)

    image = None
    if args.image:
        if not is_supported_format(args.image):
            sys.stderr.write(f"glyphgen: unsupported image format: {args.image}\n")
            return 2
        try:
            image = open_image(args.image)
        except (OSError, ValueError) as exc:
            sys.stderr.write(f"glyphgen: cannot open {args.image}: {exc}\n")
            return 2
    text = args.text or ""

    engine = EngineKind(cfg["app"]["engine"])
    if args.print_once:
        payload = text if engine == EngineKind.TEXT else image
        if payload is None:
            sys.stderr.write(f"glyphgen: the {engine.value} engine needs an image\n")
            return 2
        return render_once(cfg, payload, engine)

    if os.name == "nt" and not sys.stdout.isatty():
        print("No Windows console detected. Run from cmd, PowerShell, or Windows Terminal.")
        return 1

    from glyphgen.ui.app import GlyphApp

    app = GlyphApp(cfg, image=image, text=text)
    app.run()
    cfg.save()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
