#!/usr/bin/env python3
"""
Audio2Text command line tool.

Usage:
    # Install whisper/ffmpeg/ffprobe for this machine
    python -m entrypoints.cli.main provision [--components whisper ffmpeg]

    # List models, or download one ("all" downloads every model)
    python -m entrypoints.cli.main models --list
    python -m entrypoints.cli.main models base

    # Transcribe a file
    python -m entrypoints.cli.main transcribe -i speech.mp3 -m base -l auto -o output.txt
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from core.config import get_settings
from core.constants import ALL_MODELS, Component, OutputFormat
from core.errors import STTError
from core.logger import configure_script_logging, logger


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


async def cmd_provision(args: argparse.Namespace) -> int:
    from core.container import get_transcription_pipeline

    pipeline = get_transcription_pipeline()
    result = await pipeline.ensure_assets(args.components)
    _print_json(result.to_dict())

    if not result.success:
        logger.error(result.error or f"{len(result.failed)} file(s) failed to download")
        return 1
    logger.success("All executables installed")
    return 0


async def cmd_models(args: argparse.Namespace) -> int:
    from core.container import get_model_cache

    cache = get_model_cache()

    if args.list or not args.name:
        for name, cached in cache.list_available_models().items():
            print(f"  {name:<15} {'cached' if cached else '-'}")
        print(f"  {ALL_MODELS}")
        return 0

    result = await cache.ensure_model(args.name)
    _print_json(result.to_dict())
    return 0 if result.success else 1


def _render_output(result) -> str:
    """Prefer plain text; fall back to the JSON document."""
    txt = result.output_for(OutputFormat.TXT)
    if txt is not None:
        return txt.content
    return json.dumps([o.content for o in result.outputs], indent=2, ensure_ascii=False)


async def cmd_transcribe(args: argparse.Namespace) -> int:
    from core.container import get_transcription_pipeline

    pipeline = get_transcription_pipeline()

    if args.check_audio and not await pipeline.check_audio_presence(args.input):
        logger.error(f"No audio stream found in '{args.input}'")
        return 1

    result = await pipeline.transcribe(args.input, args.model, args.language)

    if not result.success:
        logger.error(f"Conversion failed: {result.message}")
        return 1

    logger.success("Conversion successful.")
    text = _render_output(result)
    print(text)

    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        logger.info(f"Transcribed text saved to {args.output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Convert speech audio files to text with whisper.cpp.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        default=settings.script_log_level,
        help="Log level (default: SCRIPT_LOG_LEVEL)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Write logs to stderr as JSON lines",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    provision = sub.add_parser("provision", help="Install platform executables")
    provision.add_argument(
        "--components",
        nargs="+",
        default=None,
        help=f"Components to install (default: all of {', '.join(c.value for c in Component)})",
    )
    provision.set_defaults(handler=cmd_provision)

    models = sub.add_parser("models", help="List or download whisper models")
    models.add_argument("name", nargs="?", help=f"Model name or '{ALL_MODELS}'")
    models.add_argument("--list", action="store_true", help="List models")
    models.set_defaults(handler=cmd_models)

    transcribe = sub.add_parser("transcribe", help="Transcribe an audio file")
    transcribe.add_argument("-i", "--input", required=True, help="Path to input audio file")
    transcribe.add_argument(
        "-m", "--model", default=settings.whisper_model, help="Name of the model to use"
    )
    transcribe.add_argument(
        "-l",
        "--language",
        default=settings.whisper_language,
        help="Spoken language for transcription",
    )
    transcribe.add_argument("-o", "--output", help="Path to save output file")
    transcribe.add_argument(
        "--check-audio",
        action="store_true",
        help="Fail early if the input has no audio stream",
    )
    transcribe.set_defaults(handler=cmd_transcribe)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_script_logging(level=args.log_level, json_format=args.json_logs)

    try:
        return asyncio.run(args.handler(args))
    except STTError as e:
        logger.error(f"Error: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
