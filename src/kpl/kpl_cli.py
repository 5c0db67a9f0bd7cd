"""
KPL CLI Entrypoint.

This module provides the command-line interface for syntax-checking KPL programs.

Features:
    - Read source from a file or an inline string.
    - Lex and parse the program, stopping at the first error.
    - Write the transcript of matched tokens to `result.txt`, another file, or stdout.
    - Optionally trace parser productions through `logging`.

Example usage:
    kpl example1.kpl                 # transcript written to result.txt
    kpl example1.kpl -o -            # transcript on stdout
    kpl -s "program P; begin end."   # inline source, transcript on stdout
    kpl example1.kpl --trace -q      # production trace only

Exit status:
    0 when the program parses, 1 on a lexical or syntax error (or nesting too
    deep to parse), 2 when the input file cannot be read or decoded.

Functions:
    run_kpl(source: str, is_string: bool = False, out: str | None = None,
            quiet: bool = False) -> int:
        Executes the lex → parse pipeline and reports the outcome.

    main() -> None:
        Parses CLI arguments and invokes `run_kpl`.
"""

import argparse
import contextlib
import logging
import sys
from typing import TextIO

from kpl.kpl_errors import KPLError
from kpl.kpl_parser import parse_source

EXIT_OK = 0
EXIT_SYNTAX_ERROR = 1
EXIT_IO_ERROR = 2

DEFAULT_RESULT_FILE = "result.txt"
NESTING_TOO_DEEP = "Program is nested too deeply to parse!"


def _open_transcript(
    stack: contextlib.ExitStack, out: str | None, is_string: bool, quiet: bool
) -> TextIO | None:
    if quiet:
        return None
    if out is None:
        out = "-" if is_string else DEFAULT_RESULT_FILE
    if out == "-":
        return sys.stdout
    try:
        return stack.enter_context(open(out, "w", encoding="utf-8"))
    except OSError:
        print(f"Warning: cannot open {out} for writing", file=sys.stderr)
        return None


def run_kpl(
    source: str,
    is_string: bool = False,
    out: str | None = None,
    quiet: bool = False,
) -> int:
    """
    Run the KPL front end: read, lex and parse, writing the token transcript.

    Args:
        source (str): The KPL source code or path to a source file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        out (str | None): Transcript destination. Defaults to `result.txt` for files
            and stdout for inline source; `-` means stdout. If it cannot be opened
            a warning is printed and the parse runs without a transcript.
        quiet (bool): If True, no transcript is written.

    Returns:
        int: The process exit status.

    Side Effects:
        - May write the transcript file.
        - Prints errors to stderr (and to the transcript, after the last matched token).
    """
    if is_string:
        text = source
    else:
        try:
            with open(source, encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError):
            print("Can't read input file!", file=sys.stderr)
            return EXIT_IO_ERROR

    with contextlib.ExitStack() as stack:
        transcript = _open_transcript(stack, out, is_string, quiet)
        try:
            parse_source(text, transcript=transcript)
        except KPLError as e:
            if transcript is not None and transcript is not sys.stdout:
                transcript.write(f"{e}\n")
            print(e, file=sys.stderr)
            return EXIT_SYNTAX_ERROR
        except RecursionError:
            print(NESTING_TOO_DEEP, file=sys.stderr)
            return EXIT_SYNTAX_ERROR
    return EXIT_OK


def main() -> None:
    """
    Entry point for the KPL CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `-o`, `--out`: Transcript destination (`-` for stdout).
        - `-q`, `--quiet`: Do not write a transcript.
        - `--trace`: Log each parser production at DEBUG level to stderr.
    """
    parser = argparse.ArgumentParser(prog="kpl", description="KPL syntax checker")
    parser.add_argument("source", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-o",
        "--out",
        metavar="OUTFILE",
        help=f"Transcript file (default: {DEFAULT_RESULT_FILE}; '-' for stdout)",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true", help="Do not write a token transcript"
    )
    parser.add_argument(
        "--trace", action="store_true", help="Trace parser productions to stderr"
    )

    args = parser.parse_args()

    if args.trace:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s - %(name)s - %(message)s"
        )

    sys.exit(
        run_kpl(
            source=args.source,
            is_string=args.string,
            out=args.out,
            quiet=args.quiet,
        )
    )


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
