"""Command-line interface for saving speech to disk or running the server."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import get_settings
from .errors import SynthesisError
from .languages import DEFAULT_CATALOG
from .services.synthesizer import TextToSpeech

# Colors for terminal output
GREEN = "\033[0;32m"
RED = "\033[0;31m"
CYAN = "\033[0;36m"
BOLD = "\033[1m"
NC = "\033[0m"  # No Color


def _read_text(args: argparse.Namespace) -> str:
    if args.file:
        return Path(args.file).read_text(encoding="utf-8")
    return " ".join(args.text)


async def cmd_save(args: argparse.Namespace) -> int:
    """Synthesize text into an audio file."""
    try:
        text = _read_text(args)
    except OSError as exc:
        print(f"{RED}Cannot read text: {exc}{NC}")
        return 1

    try:
        tts = TextToSpeech(args.lang)
    except SynthesisError as exc:
        print(f"{RED}{exc}{NC}")
        return 1

    try:
        written = await tts.save(args.output, text)
    except SynthesisError as exc:
        print(f"{RED}Synthesis failed: {exc}{NC}")
        return 1
    finally:
        await tts.aclose()

    print(f"{GREEN}●{NC} Saved {CYAN}{written}{NC} bytes to {BOLD}{args.output}{NC}")
    return 0


async def cmd_languages(args: argparse.Namespace) -> int:
    """List supported languages."""
    for language in DEFAULT_CATALOG:
        print(f"  {CYAN}{language.code:<8}{NC} {language.display_name}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP server."""
    from .main import serve

    serve(host=args.host, port=args.port)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="text2speech",
        description="Turn arbitrary text into speech audio",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s save --lang en --output hello.mp3 Hello world
  %(prog)s save --lang fr --output story.mp3 --file story.txt
  %(prog)s serve --port 8000
  %(prog)s languages
""",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # save
    save_parser = subparsers.add_parser("save", help="Save synthesized speech to a file")
    save_parser.add_argument("text", nargs="*", help="Text to speak")
    save_parser.add_argument("--file", "-f", help="Read the text from this file instead")
    save_parser.add_argument("--output", "-o", required=True, help="Destination audio file")
    save_parser.add_argument(
        "--lang", "-l",
        default=settings.default_language,
        help="Language code (default: %(default)s)",
    )

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP speech server")
    serve_parser.add_argument("--host", default=settings.host)
    serve_parser.add_argument("--port", type=int, default=settings.port)

    # languages
    subparsers.add_parser("languages", help="List supported languages")

    args = parser.parse_args(argv)

    if args.command == "save" and not args.file and not args.text:
        parser.error("save requires TEXT or --file")
    if args.command == "serve":
        return cmd_serve(args)

    commands = {
        "save": cmd_save,
        "languages": cmd_languages,
    }

    return asyncio.run(commands[args.command](args))


if __name__ == "__main__":
    sys.exit(main())
