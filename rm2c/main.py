import argparse
import logging
import sys
import traceback
from typing import Dict, List, Optional

from .c_check import check_c_syntax
from .error import TranspileFailure
from .options import DEFAULT_JUMP_TARGETS, CodingStyle, Options
from .parse_file import Program, parse_file
from .program_text import get_program_text

# Single-dash spellings accepted for compatibility, matched case-insensitively
LEGACY_FLAGS: Dict[str, str] = {
    "-alljumps": "--all-jumps",
    "-jumps": "--jumps",
}

EPILOG = """\
Without --all-jumps, only some jump operations are allowed, and jumps by a
register offset are limited to the offsets given with --jumps (default: 1,
the result of the gt and eq comparisons). With --all-jumps, every jump goes
through a switch over all instructions, which may reduce the quality of the
C compiler's output.

The generated program takes 0 to 6 arguments, the starting values of
registers 0-5. Registers not passed start at 0.
"""


def set_up_logging(debug: bool) -> None:
    logging.basicConfig(
        format="[%(levelname)s] %(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


def print_exception(exc: Exception, context: Optional[str]) -> None:
    context_phrase = f" in {context}" if context is not None else ""
    if isinstance(exc, OSError):
        print(f"OSError{context_phrase}: {exc}", file=sys.stderr)
    elif isinstance(exc, TranspileFailure):
        print(f"Transpilation failure{context_phrase}: {exc}", file=sys.stderr)
    else:
        print(f"Internal error{context_phrase}:", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)


def read_program(filename: str) -> Program:
    if filename == "-":
        return parse_file(sys.stdin)
    try:
        with open(filename, "r", encoding="utf-8-sig") as f:
            return parse_file(f)
    except UnicodeDecodeError as e:
        raise TranspileFailure(f"{filename} is not valid UTF-8: {e.reason}")


def run(options: Options) -> int:
    try:
        program = read_program(options.filename)
    except Exception as e:
        print_exception(e, context=None)
        return 1

    try:
        program_text = get_program_text(program, options)
        if options.check_syntax:
            check_c_syntax(program_text)
    except Exception as e:
        print_exception(e, context=options.filename)
        return 1

    print(program_text)
    return 0


def parse_flags(flags: List[str]) -> Options:
    parser = argparse.ArgumentParser(
        description="Transpile a register machine program to C.",
        usage="%(prog)s [--all-jumps | --jumps [N ...]] filename > program.c",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    group = parser.add_argument_group("Input Options")
    group.add_argument(
        "filename",
        help="Input program, starting with an `#ip <register>` line. "
        'Use "-" to read from stdin.',
    )

    group = parser.add_argument_group("Jump Options")
    group.add_argument(
        "--all-jumps",
        dest="all_jumps",
        action="store_true",
        help="Allow every kind of jump, using a switch over all instructions "
        "for jumps whose target is only known at runtime. Overrides --jumps.",
    )
    group.add_argument(
        "--jumps",
        metavar="N",
        dest="jumps",
        nargs="*",
        type=int,
        default=None,
        help="Register offsets that relative jumps may take, besides 0. "
        "Default: 1. Given with no offsets, acts as --all-jumps.",
    )

    group = parser.add_argument_group("Output Options")
    group.add_argument(
        "--asm-comments",
        dest="asm_comments",
        action="store_true",
        help="Annotate each block with the instruction it was translated from",
    )
    group.add_argument(
        "--check-syntax",
        dest="check_syntax",
        action="store_true",
        help="Parse the generated C before printing it, and fail if it is invalid",
    )
    group.add_argument(
        "--debug",
        dest="debug",
        action="store_true",
        help="Print debug info to stderr",
    )

    group = parser.add_argument_group("Formatting Options")
    group.add_argument(
        "--allman",
        dest="allman",
        action="store_true",
        help="Put braces on separate lines",
    )
    group.add_argument(
        "--comment-style",
        dest="comment_style",
        type=CodingStyle.CommentStyle,
        choices=list(CodingStyle.CommentStyle),
        default="multiline",
        help=(
            "Comment formatting. "
            '"multiline" for C-style `/* ... */`, '
            '"oneline" for C++-style `// ...`. '
            "Default: multiline"
        ),
    )
    group.add_argument(
        "--comment-column",
        dest="comment_column",
        metavar="N",
        type=int,
        default=52,
        help="Column number to justify comments to. Set to 0 to disable justification. Default: 52",
    )

    if not flags:
        parser.print_help(sys.stderr)
        sys.exit(1)

    flags = [LEGACY_FLAGS.get(flag.lower(), flag) for flag in flags]
    args = parser.parse_args(flags)

    if args.all_jumps:
        jump_targets: List[int] = []
    elif args.jumps is not None:
        jump_targets = args.jumps
    else:
        jump_targets = list(DEFAULT_JUMP_TARGETS)

    coding_style = CodingStyle(
        newline_after_function=args.allman,
        newline_after_if=args.allman,
        newline_before_else=args.allman,
        comment_style=args.comment_style,
        comment_column=args.comment_column,
    )

    return Options(
        filename=args.filename,
        jump_targets=jump_targets,
        asm_comments=args.asm_comments,
        check_syntax=args.check_syntax,
        debug=args.debug,
        coding_style=coding_style,
    )


def main() -> None:
    options = parse_flags(sys.argv[1:])
    set_up_logging(options.debug)
    sys.exit(run(options))


if __name__ == "__main__":
    main()
