from __future__ import annotations

import argparse
import asyncio
import importlib
import json
import logging
import sys
from pathlib import Path

from signlink.config import EngineConfig, load_config
from signlink.engine import SigningEngine
from signlink.launcher import HttpxLauncher
from signlink.parser import parse
from signlink.signer import Signer

EXIT_OK = 0
EXIT_NOT_ACCEPTED = 1
EXIT_UNHANDLED = 2

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def load_signer(signer_module: str | None) -> Signer | None:
    if not signer_module:
        return None
    mod = importlib.import_module(signer_module)
    signer = getattr(mod, "signer", None)
    if signer is None:
        raise RuntimeError(f"signer module must expose `signer`: {signer_module}")
    return signer


def _cmd_parse(args: argparse.Namespace, config: EngineConfig) -> int:
    request = parse(args.url, schemes=config.schemes)
    if request is None:
        print("unhandled", file=sys.stderr)
        return EXIT_UNHANDLED
    print(json.dumps(request.to_dict(), indent=2, sort_keys=True))
    return EXIT_OK


async def _handle(engine: SigningEngine, url: str) -> bool:
    accepted = engine.handle(url)
    await engine.drain()
    launcher = engine.dispatcher.encoder.launcher
    if isinstance(launcher, HttpxLauncher):
        await launcher.drain()
    return accepted


def _cmd_handle(args: argparse.Namespace, config: EngineConfig) -> int:
    engine = SigningEngine.from_config(config, load_signer(args.signer_module))
    accepted = asyncio.run(_handle(engine, args.url))
    return EXIT_OK if accepted else EXIT_NOT_ACCEPTED


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="signlink", description="URL signing command protocol")
    p.add_argument("--config", default=None, type=Path, help="Path to signlink config JSON")
    p.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Override the config log level",
    )
    sub = p.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Decode a command URL and print it as JSON")
    p_parse.add_argument("url")
    p_parse.set_defaults(func=_cmd_parse)

    p_handle = sub.add_parser("handle", help="Handle a command URL end to end")
    p_handle.add_argument("url")
    p_handle.add_argument(
        "--signer-module", default=None, help="Python module exposing a `signer` object"
    )
    p_handle.set_defaults(func=_cmd_handle)

    args = p.parse_args(argv)
    config = load_config(args.config) if args.config else EngineConfig()
    logging.basicConfig(
        level=args.log_level or config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return int(args.func(args, config))


if __name__ == "__main__":
    sys.exit(main())
