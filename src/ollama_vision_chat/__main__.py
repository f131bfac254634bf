"""CLI entrypoint for ollama-vision-chat."""

from __future__ import annotations

import argparse
from importlib import metadata
from pathlib import Path
from typing import Sequence

from .app import VisionChatApp
from .config import ensure_config_dir, load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ollama-vision-chat", description="Ollama Chat with text and images"
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a config.toml to use instead of the default location",
    )
    parser.add_argument(
        "--backend",
        choices=("placeholder", "ollama"),
        default=None,
        help="Override backend.kind from the config file",
    )
    parser.add_argument(
        "--model",
        default=None,
        help="Override ollama.model from the config file",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Ensure configuration exists, handle CLI flags, and run the TUI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("ollama-vision-chat")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"ollama-vision-chat {version}")
        return

    ensure_config_dir()
    config = load_config(config_path=args.config)
    if args.backend:
        config["backend"]["kind"] = args.backend
    if args.model and args.model.strip():
        config["ollama"]["model"] = args.model.strip()

    app = VisionChatApp(config=config)
    app.run()


if __name__ == "__main__":
    main()
