"""
main.py — DotDecoder application entry point.

Parses CLI args, loads configuration, and either answers a one-shot
lookup (``--word`` / ``--bits``) or starts the web dot board.
"""

from __future__ import annotations

import argparse
import logging
import sys
import traceback
from typing import Optional, Sequence

_BANNER = r"""
  ____        _   ____                     _
 |  _ \  ___ | |_|  _ \  ___  ___ ___   __| | ___ _ __
 | | | |/ _ \| __| | | |/ _ \/ __/ _ \ / _` |/ _ \ '__|
 | |_| | (_) | |_| |_| |  __/ (_| (_) | (_| |  __/ |
 |____/ \___/ \__|____/ \___|\___\___/ \__,_|\___|_|

            DotDecoder  v1.0 — BIP-39 Binary Decoder
"""


# ──────────────────────────────────────────────────────────────
# Argument parsing
# ──────────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dotdecoder",
        description="DotDecoder — 12-dot binary ⇄ BIP-39 word decoder",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    lookup = p.add_mutually_exclusive_group()
    lookup.add_argument(
        "--word",
        default=None,
        help="Resolve a word or unique prefix and print its dot pattern",
    )
    lookup.add_argument(
        "--bits",
        default=None,
        help="Decode a 12-character 0/1 dot pattern (MSB first) to its word",
    )
    p.add_argument(
        "--config",
        default=None,
        help="Path to dotdecoder.yaml. Auto-discovers if not specified.",
    )
    p.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARN"],
        default=None,
        help="Minimum log level for stderr output (overrides config)",
    )
    p.add_argument("--host", default=None, help="Bind address for the web board")
    p.add_argument("--port", type=int, default=None, help="Port for the web board")
    p.add_argument(
        "--allow-online",
        action="store_true",
        help="Do not lock the board while the device is online (development only)",
    )
    return p


# ──────────────────────────────────────────────────────────────
# One-shot lookups
# ──────────────────────────────────────────────────────────────

def _run_word(text: str, wordlist) -> int:
    """Print the match for *text*. Returns exit code."""
    from encoder.bit_codec import format_bits, match_word

    match = match_word(text, wordlist)
    print(f"state : {match.state.value}")
    if not match.is_resolved:
        print("word  : -")
        return 1
    print(f"word  : {match.word}")
    print(f"number: #{match.word_number}")
    print(f"bits  : {format_bits(match.bits)}")
    return 0


def _run_bits(text: str, wordlist) -> int:
    """Print the decode result for a 0/1 string. Returns exit code."""
    from encoder.bit_codec import BitVectorError, encode, parse_bits

    try:
        bits = parse_bits(text)
    except BitVectorError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1
    result = encode(bits, wordlist)
    print(f"value : {result.numeric_value}")
    print(f"number: {'#' + str(result.word_number) if result.is_valid else '#-'}")
    print(f"word  : {result.word or '-'}")
    print(f"valid : {result.is_valid}")
    return 0 if result.is_valid else 1


# ──────────────────────────────────────────────────────────────
# Web entry point
# ──────────────────────────────────────────────────────────────

def _run_web(config, wordlist, allow_online: bool, host: str, port: int) -> int:
    """Start the web dot board in the main thread. Returns exit code."""
    from pipeline.controller import DecoderController
    from safety.exposure_guard import ExposureGuard
    from ui.web_app import start_web_server

    controller = DecoderController(wordlist=wordlist, config=config)
    guard = ExposureGuard(
        on_reset=lambda reason: controller.reset_all(reason=reason),
        require_offline=config.guard.require_offline and not allow_online,
    )
    print(f"[INFO] Dot board → http://{host}:{port}/")
    print("       Press Ctrl-C to stop.")
    try:
        start_web_server(controller, guard, host=host, port=port)
    except KeyboardInterrupt:
        pass
    finally:
        controller.reset_all(reason="shutdown")
    return 0


# ──────────────────────────────────────────────────────────────
# Main
# ──────────────────────────────────────────────────────────────

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Application entry point. Returns process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    from core.config import load_config
    from core.logger import get_logger

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    level_name = (args.log_level or config.logging.level).upper()
    level_map = {"DEBUG": logging.DEBUG, "INFO": logging.INFO, "WARN": logging.WARNING,
                 "WARNING": logging.WARNING, "ERROR": logging.ERROR}
    logging.basicConfig(level=level_map.get(level_name, logging.INFO))

    log = get_logger()
    log.info("main", "args_parsed", {
        "mode": "word" if args.word is not None else "bits" if args.bits is not None else "web",
        "log_level": level_name,
        "allow_online": args.allow_online,
    })

    exit_code = 0
    try:
        from encoder.wordlist import WordlistError, load_wordlist

        try:
            wordlist = load_wordlist(config.dictionary.resolved_path)
        except (FileNotFoundError, WordlistError) as exc:
            print(f"[ERROR] Dictionary unusable: {exc}", file=sys.stderr)
            return 1

        if args.word is not None:
            exit_code = _run_word(args.word, wordlist)
        elif args.bits is not None:
            exit_code = _run_bits(args.bits, wordlist)
        else:
            print(_BANNER)
            exit_code = _run_web(
                config,
                wordlist,
                allow_online=args.allow_online,
                host=args.host or config.web.host,
                port=args.port or config.web.port,
            )
    except Exception:                              # noqa: BLE001
        tb = traceback.format_exc()
        print(tb, file=sys.stderr)
        log.critical("main", "unhandled_exception", {"traceback": tb})
        exit_code = 1
    finally:
        log.flush()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
