"""Pencil Sketch - command line entry point."""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config_manager import ConfigManager
from .errors import SketchError
from .image_processing import SketchProcessor
from .image_processing.texture import available_textures, load_texture
from .models import CONFIG_FILE, BlendMode, ExportSpec, QualityTier

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pencil-sketch",
        description="Turn a photograph into a pencil sketch.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("input", help="Input image path")
    parser.add_argument("output", help="Output image path (.png or .jpg)")

    # Creative options default to None so saved settings show through
    parser.add_argument("--intensity", type=int, help="Graphite intensity / blur radius (1-60)")
    parser.add_argument("--contrast", type=int, help="Contrast (-100 to 100)")
    parser.add_argument("--brightness", type=int, help="Brightness (-100 to 100)")
    parser.add_argument(
        "--color",
        dest="color_mode",
        action=argparse.BooleanOptionalAction,
        help="Blend muted original colors into the sketch",
    )
    parser.add_argument("--color-strength", type=int, help="Color strength (0-100)")
    parser.add_argument(
        "--edges",
        dest="edge_detection",
        action=argparse.BooleanOptionalAction,
        help="Darken detected edges",
    )
    parser.add_argument("--edge-strength", type=int, help="Edge strength (0-100)")

    parser.add_argument(
        "--texture",
        help=f"Paper texture: one of {', '.join(available_textures())}, or an image file",
    )
    parser.add_argument("--texture-opacity", type=float, help="Texture opacity (0-1)")
    parser.add_argument(
        "--blend-mode",
        choices=[mode.value for mode in BlendMode],
        help="How the texture is blended",
    )

    parser.add_argument(
        "--format",
        choices=["png", "jpeg", "jpg"],
        help="Output format (defaults to the output file extension)",
    )
    parser.add_argument(
        "--quality",
        choices=[tier.value for tier in QualityTier],
        help="Export quality tier",
    )

    parser.add_argument("--config", type=Path, default=CONFIG_FILE, help="Settings file")
    parser.add_argument(
        "--save-config",
        action="store_true",
        help="Store the effective settings as the new defaults",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _merge_settings(config, args):
    """Overlay explicitly given command line values onto saved settings."""
    option_fields = (
        "intensity",
        "contrast",
        "brightness",
        "color_mode",
        "color_strength",
        "edge_detection",
        "edge_strength",
    )
    changes = {
        name: getattr(args, name)
        for name in option_fields
        if getattr(args, name) is not None
    }
    config.options = config.options.updated(**changes).clamped()

    overrides = {
        "texture": args.texture,
        "texture_opacity": args.texture_opacity,
        "texture_blend_mode": args.blend_mode,
        "export_quality": args.quality,
    }
    config = replace(config, **{k: v for k, v in overrides.items() if v is not None})

    if args.format:
        config.export_format = args.format
    elif args.output.suffix:
        config.export_format = args.output.suffix.lstrip(".")
    return config


def run(args: argparse.Namespace) -> int:
    config_manager = ConfigManager(args.config)
    config = _merge_settings(config_manager.load(), args)

    spec = ExportSpec.parse(config.export_format, config.export_quality)

    texture = config.texture
    if texture and Path(texture).is_file():
        texture = load_texture(texture)

    processor = SketchProcessor(
        options=config.options,
        texture=texture,
        blend_mode=config.texture_blend_mode,
        texture_opacity=config.texture_opacity,
    )
    processed = processor.process(args.input)
    exported = processor.export(
        processed.result,
        spec,
        original_size=(processed.original_width, processed.original_height),
    )

    args.output.write_bytes(exported.data)
    logger.info(
        f"Saved {exported.width}x{exported.height} {exported.mime_type} to {args.output}"
    )

    if args.save_config:
        success, error = config_manager.save(config)
        if success:
            logger.info(f"Saved settings to {config_manager.config_path}")
        else:
            logger.warning(f"Could not save settings: {error}")
    return 0


def main(argv: "list[str] | None" = None) -> int:
    """Run the pencil sketch converter from the command line."""
    parser = build_parser()
    args = parser.parse_args(argv)
    args.output = Path(args.output)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
    )

    try:
        return run(args)
    except (SketchError, ValueError) as e:
        logger.error(f"Error: {e}")
        return 1
    except OSError as e:
        logger.error(f"Could not write output: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
