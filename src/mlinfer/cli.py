"""
mlinfer Command-Line Interface.

Infers the type of an expression tree stored as JSON (see
``mlinfer.serialization`` for the format).

Usage:
    mlinfer infer program.json
    mlinfer infer program.json --annotated
    mlinfer infer - --json < program.json
    mlinfer show program.json          # Print the expression as source text
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from mlinfer import __version__
from mlinfer.formatter import format_expression, format_typed_tree
from mlinfer.inference import (
    Expression,
    InferenceConfig,
    TypeInferrer,
    raised_recursion_limit,
)
from mlinfer.serialization import from_json, typed_to_dict
from mlinfer.utils.errors import InferenceError, MalformedExpressionError

logger = logging.getLogger("mlinfer")


# =============================================================================
# ANSI Color Codes for Terminal Output
# =============================================================================


class Colors:
    """ANSI escape codes for colored terminal output."""

    RED = "\033[91m"
    GREEN = "\033[92m"
    CYAN = "\033[96m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    @classmethod
    def disable(cls) -> None:
        """Disable all colors (for non-TTY output)."""
        cls.RED = ""
        cls.GREEN = ""
        cls.CYAN = ""
        cls.BOLD = ""
        cls.RESET = ""


def _init_colors() -> None:
    """Initialize colors based on terminal capabilities."""
    if not sys.stdout.isatty() or os.environ.get("NO_COLOR"):
        Colors.disable()


_init_colors()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="mlinfer",
        description="mlinfer - Hindley-Milner type inference for expression trees",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="warning",
        help="Logging verbosity (debug shows constraints and substitutions)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Infer command
    infer_parser = subparsers.add_parser(
        "infer",
        aliases=["i"],
        help="Infer the type of an expression",
    )
    infer_parser.add_argument(
        "input",
        type=str,
        help="Input JSON expression tree ('-' for stdin)",
    )
    infer_parser.add_argument(
        "--annotated",
        action="store_true",
        help="Show the resolved type of every node",
    )
    infer_parser.add_argument(
        "--constraints",
        action="store_true",
        help="Also list the generated constraints",
    )
    infer_parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON",
    )
    _add_recursion_limit(infer_parser)

    # Show command
    show_parser = subparsers.add_parser(
        "show",
        help="Print a JSON expression tree as source text",
    )
    show_parser.add_argument(
        "input",
        type=str,
        help="Input JSON expression tree ('-' for stdin)",
    )
    _add_recursion_limit(show_parser)

    return parser


def _add_recursion_limit(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--recursion-limit",
        type=int,
        default=InferenceConfig.recursion_limit,
        help="Minimum interpreter recursion limit while loading and inferring "
        f"(default: {InferenceConfig.recursion_limit})",
    )


def _load(input_path: str) -> Expression:
    filename = "<stdin>" if input_path == "-" else input_path
    try:
        if input_path == "-":
            text = sys.stdin.read()
        else:
            text = Path(input_path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedExpressionError(
            f"{filename} is not valid UTF-8: {exc.reason} at byte {exc.start}"
        ) from exc
    return from_json(text, filename)


def _error(message: str) -> int:
    print(f"{Colors.RED}{Colors.BOLD}error:{Colors.RESET} {message}", file=sys.stderr)
    return 1


def cmd_infer(args: argparse.Namespace) -> int:
    """Handle the infer command."""
    # Loading, inference and rendering all recurse over the tree.
    with raised_recursion_limit(args.recursion_limit):
        return _infer_and_report(args)


def _infer_and_report(args: argparse.Namespace) -> int:
    try:
        expression = _load(args.input)
        config = InferenceConfig(
            recursion_limit=args.recursion_limit,
            annotate=args.annotated,
        )
        result = TypeInferrer(config).run(expression)
    except OSError as exc:
        return _error(f"cannot read {args.input}: {exc.strerror or exc}")
    except InferenceError as exc:
        logger.debug("inference failed", exc_info=True)
        return _error(str(exc))

    if args.json:
        payload: dict = {"type": str(result.type_)}
        if args.constraints:
            payload["constraints"] = [str(constraint) for constraint in result.constraints]
        if result.annotated is not None:
            payload["annotated"] = typed_to_dict(result.annotated)
        print(json.dumps(payload, indent=2))
        return 0

    if args.constraints:
        print(f"{Colors.CYAN}Constraints:{Colors.RESET}")
        for constraint in result.constraints:
            print(f"  {constraint}")
        print()
    if result.annotated is not None:
        print(format_typed_tree(result.annotated))
        print()
    print(f"{Colors.GREEN}{Colors.BOLD}{result.type_}{Colors.RESET}")
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Handle the show command."""
    with raised_recursion_limit(args.recursion_limit):
        try:
            expression = _load(args.input)
        except OSError as exc:
            return _error(f"cannot read {args.input}: {exc.strerror or exc}")
        except InferenceError as exc:
            return _error(str(exc))

        print(format_expression(expression))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    command_handlers = {
        "infer": cmd_infer,
        "i": cmd_infer,
        "show": cmd_show,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
