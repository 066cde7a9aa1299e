"""Command-line interface for Subtitle Translator."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from . import __version__
from .config import OUTPUT_FORMATS, TranslatorConfig, default_config_template
from .detector import detect
from .errors import AlignmentError
from .extractor import extract
from .files import read_subtitle_file
from .merger import BILINGUAL_POSITIONS
from .models import SubtitleFormat
from .pipeline import SubtitleTranslator
from .providers import FREE_SERVICES, LLM_MODELS, TRANSLATION_SERVICES
from .text_utils import truncate_text

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "subtitle-translator.config.json"
SAMPLE_LINES = 3


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its sub-commands."""
    parser = argparse.ArgumentParser(
        prog="subtitle-translator",
        description="Batch subtitle translator for SRT, WebVTT, ASS/SSA and LRC files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s translate video.srt -t it                 # Translate to Italian
  %(prog)s translate ./subs -t es,fr -m deepl        # Directory, two languages
  %(prog)s translate video.srt -t zh -b              # Bilingual ASS output
  %(prog)s detect video.ass -v                       # Show format information
  %(prog)s config --method openai                    # Write a config template
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    # translate
    translate = subparsers.add_parser("translate", help="Translate subtitle files or directories")
    translate.add_argument("input", help="Subtitle file or directory")
    translate.add_argument("-o", "--output", help="Output directory (default: ./translated)")
    translate.add_argument("-t", "--target", help="Target language code(s), comma-separated (e.g. en,it)")
    translate.add_argument("-s", "--source", help="Source language code (default: auto)")
    translate.add_argument("-m", "--method", help="Translation method (default: gtxFreeAPI)")
    translate.add_argument("-k", "--api-key", help="API key for the translation method")
    translate.add_argument("-b", "--bilingual", action="store_true", help="Keep the original text next to the translation")
    translate.add_argument("--position", choices=BILINGUAL_POSITIONS, help="Translation position in bilingual output (default: below)")
    translate.add_argument("--format", choices=OUTPUT_FORMATS, help="Output format (default: auto)")
    translate.add_argument("--config", help="JSON configuration file")
    translate.add_argument("--dry-run", action="store_true", help="Show what would be translated without calling the provider")
    translate.add_argument("--parallel", type=int, help="Concurrent requests, 1-10 (default: 3)")
    translate.add_argument("--delay", type=int, help="Delay between request groups in ms (default: 1000)")
    translate.add_argument("--batch-size", dest="batch_size", type=int, help="Lines per request group (default: 5)")
    translate.add_argument("--timeout", type=float, help="Seconds per file after which no new requests are started")
    translate.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    # detect
    detect_cmd = subparsers.add_parser("detect", help="Detect subtitle format and show file information")
    detect_cmd.add_argument("file", help="Subtitle file")
    detect_cmd.add_argument("-v", "--verbose", action="store_true", help="Show sample content")

    # list-methods
    list_methods = subparsers.add_parser("list-methods", help="List available translation methods")
    list_methods.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    # config
    config_cmd = subparsers.add_parser("config", help="Write a configuration file template")
    config_cmd.add_argument("-o", "--output", default=DEFAULT_CONFIG_FILENAME, help="Output path for the config file")
    config_cmd.add_argument("--method", help="Default translation method")
    config_cmd.add_argument("--target", help="Default target language")
    config_cmd.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    return parser


async def translate_command(args: argparse.Namespace) -> int:
    """
    Run the translate sub-command.

    Returns:
        Exit code
    """
    input_path = Path(args.input).expanduser()
    if not input_path.exists():
        logger.error(f"Input path does not exist: {input_path}")
        return 1

    base = None
    if args.config:
        config_path = Path(args.config).expanduser()
        if not config_path.is_file():
            logger.error(f"Configuration file does not exist: {config_path}")
            return 1
        try:
            base = TranslatorConfig.from_file(config_path)
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to load configuration file {config_path}: {e}")
            return 1

    config = TranslatorConfig.from_args(args, base)
    error = config.validate()
    if error:
        logger.error(error)
        if "method" in error:
            logger.error('Use "list-methods" to see all available methods')
        return 1

    logger.info(
        f"Method: {config.translation_method}, "
        f"{config.source_language} -> {', '.join(config.target_languages)}"
    )
    if config.dry_run:
        logger.info("[DRY RUN] No files will be written")

    translator = SubtitleTranslator(config, show_progress=not args.verbose)
    await translator.translate_path(input_path)

    logger.info(translator.summary())
    if translator.service.cache_size:
        logger.debug(f"Translation cache entries: {translator.service.cache_size}")

    stats = translator.stats
    return 1 if stats.failed and not stats.successful else 0


def detect_command(args: argparse.Namespace) -> int:
    """Print format information for one file."""
    path = Path(args.file).expanduser()
    if not path.is_file():
        logger.error(f"File not found: {path}")
        return 1

    document = read_subtitle_file(path)
    fmt = detect(document.lines)

    print(f"File: {path}")
    print(f"Size: {path.stat().st_size / 1024:.2f} KB")
    print(f"Lines: {len(document)}")

    if fmt == SubtitleFormat.UNRECOGNIZED:
        print("Format: unknown or unsupported")
        print(f"Supported formats: {', '.join(f.value.upper() for f in SubtitleFormat.supported())}")
        return 1

    content_map = extract(document.lines, fmt)
    print(f"Format: {fmt.value.upper()}")
    print(f"Translatable lines: {len(content_map)}")

    if args.verbose and content_map:
        print("\nSample content:")
        for i, line in enumerate(content_map.content[:SAMPLE_LINES], 1):
            print(f"  {i}. {truncate_text(line, 50)}")
        remaining = len(content_map) - SAMPLE_LINES
        if remaining > 0:
            print(f"  ... and {remaining} more lines")
    return 0


def list_methods_command(args: argparse.Namespace) -> int:
    """Print translation methods grouped as free, paid and LLM services."""
    groups = [
        ("Free Services", lambda m: m in FREE_SERVICES),
        ("Paid API Services", lambda m: m not in FREE_SERVICES and m not in LLM_MODELS),
        ("AI/LLM Services", lambda m: m in LLM_MODELS),
    ]
    for title, belongs in groups:
        print(f"{title}:")
        for method, label in TRANSLATION_SERVICES:
            if belongs(method):
                print(f"  {method} - {label}")
        print()

    print("Use -m/--method to choose a translation method")
    print("  Example: subtitle-translator translate input.srt -t it -m deepl")
    return 0


def config_command(args: argparse.Namespace) -> int:
    """Write a configuration file template."""
    out_path = Path(args.output).expanduser()
    if out_path.exists():
        logger.error(f"Configuration file already exists: {out_path}")
        return 1

    valid_methods = [method for method, _ in TRANSLATION_SERVICES]
    if args.method and args.method not in valid_methods:
        logger.error(f"Invalid method: {args.method}")
        logger.error(f"Valid methods: {', '.join(valid_methods)}")
        return 1

    template = default_config_template(args.method or "gtxFreeAPI", args.target or "en")
    out_path.write_text(json.dumps(template, indent=2, ensure_ascii=False), encoding="utf-8")

    print(f"Configuration template created at: {out_path}")
    print("Next steps:")
    print("  1. Add your API keys to the configuration file")
    print("  2. Adjust translation settings as needed")
    print(f"  3. subtitle-translator translate input.srt --config {out_path}")
    return 0


COMMANDS = {
    "detect": detect_command,
    "list-methods": list_methods_command,
    "config": config_command,
}


def run(args: argparse.Namespace) -> int:
    """Dispatch a parsed command line to its sub-command."""
    if args.command == "translate":
        return asyncio.run(translate_command(args))
    return COMMANDS[args.command](args)


def main(argv=None) -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    verbose = getattr(args, "verbose", False)
    setup_logging(verbose)

    try:
        sys.exit(run(args))
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(130)
    except AlignmentError as e:
        logging.error(f"Internal error, translations out of alignment: {e}")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        if verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
