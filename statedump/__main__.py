#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
statedump/__main__.py
=====================

Command-line entry point.

Usage
-----
    python -m statedump value MODULE EXPR [EXPR ...]
    python -m statedump state MODULE:NAME [--private] [--static] [--walk-bases]

Commands
--------
    value       Import MODULE and render each expression against its namespace
    state       Render the state of a module-level object, or the static
                state of a class

Exit codes
----------
    0   output produced without diagnostics
    1   output produced, but some members could not be resolved
    2   MODULE or NAME could not be imported
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from typing import Any, List, Optional, Sequence, Tuple

from statedump import __version__
from statedump.config import FormatConfig
from statedump.errors import ErrorReporter
from statedump.introspection import ScopePolicy
from statedump.runtime import StateDumper
from statedump.sinks import StreamSink

_log = logging.getLogger("statedump")

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the ``statedump`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("statedump")
    root.setLevel(level)
    root.addHandler(handler)


def _import_module(name: str) -> Any:
    try:
        return importlib.import_module(name)
    except ImportError as exc:
        _log.error("cannot import %s: %s", name, exc)
        raise SystemExit(EXIT_INFRA)


def _split_target(raw: str) -> Tuple[str, str]:
    module, sep, attr = raw.partition(":")
    if not sep or not module or not attr:
        _log.error("expected MODULE:NAME, got %r", raw)
        raise SystemExit(EXIT_INFRA)
    return module, attr


def _lookup(module: Any, dotted: str) -> Any:
    obj = module
    for part in dotted.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            _log.error("%s has no attribute %r", getattr(obj, "__name__", obj), part)
            raise SystemExit(EXIT_INFRA)
    return obj


def _config_from_args(args: argparse.Namespace) -> FormatConfig:
    config = FormatConfig.from_env()
    changes = {}
    if args.color == "always":
        changes["colorize"] = True
    elif args.color == "never":
        changes["colorize"] = False
    elif args.color == "auto":
        changes["colorize"] = None
    if args.max_line is not None:
        changes["max_line_length"] = args.max_line
    return config.with_overrides(**changes) if changes else config


def _state_policy(target: Any, args: argparse.Namespace) -> ScopePolicy:
    if isinstance(target, type):
        policy = ScopePolicy.DEFAULT_STATIC
        if args.private:
            policy |= ScopePolicy.NON_PUBLIC
    else:
        policy = ScopePolicy.from_options(args.private, args.static)
    if args.walk_bases:
        policy &= ~ScopePolicy.DECLARED_ONLY
    return policy


# ===========================================================================
# Sub-command handlers
# ===========================================================================

def cmd_value(args: argparse.Namespace) -> int:
    module = _import_module(args.module)
    reporter = ErrorReporter()
    dumper = StateDumper(config=_config_from_args(args), reporter=reporter)
    text = dumper.format_values(args.expressions, vars(module))
    StreamSink().emit(text)
    return EXIT_ERROR if reporter.has_errors() else EXIT_OK


def cmd_state(args: argparse.Namespace) -> int:
    module_name, attr = _split_target(args.target)
    target = _lookup(_import_module(module_name), attr)
    reporter = ErrorReporter()
    dumper = StateDumper(config=_config_from_args(args), reporter=reporter)
    policy = _state_policy(target, args)
    _log.info("dumping %s with %s", args.target, policy)
    if isinstance(target, type):
        text = dumper.format_type_state(target, policy)
    else:
        text = dumper.format_state(target, policy)
    StreamSink().emit(text)
    return EXIT_ERROR if reporter.has_errors() else EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="statedump",
        description="Render object state and expression values for debugging.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="increase log verbosity (-v info, -vv debug)",
    )
    parser.add_argument(
        "--color", choices=("auto", "always", "never"), default=None,
        help="colour null/boolean tokens (default: $STATEDUMP_COLOR or never)",
    )
    parser.add_argument(
        "--max-line", type=int, default=None, metavar="N",
        help="collapse output onto one line when it fits in N characters",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    p_value = sub.add_parser("value", help="render expressions against a module")
    p_value.add_argument("module", help="module to import, e.g. 'myapp.settings'")
    p_value.add_argument("expressions", nargs="+", metavar="EXPR")
    p_value.set_defaults(func=cmd_value)

    p_state = sub.add_parser("state", help="render the members of an object or class")
    p_state.add_argument("target", metavar="MODULE:NAME")
    p_state.add_argument("--private", action="store_true", help="include _private members")
    p_state.add_argument("--static", action="store_true", help="include class attributes")
    p_state.add_argument(
        "--walk-bases", action="store_true",
        help="also render members declared on base classes",
    )
    p_state.set_defaults(func=cmd_state)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        return args.func(args)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA


if __name__ == "__main__":
    sys.exit(main())
