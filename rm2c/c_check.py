"""Syntax check of generated C, based on the pycparser library."""
import re
from typing import Match

from pycparser import c_ast as ca
from pycparser.c_parser import CParser, ParseError

from .error import TranspileFailure


def strip_comments(text: str) -> str:
    # https://stackoverflow.com/a/241506
    def replacer(match: Match[str]) -> str:
        s = match.group(0)
        if s.startswith("/"):
            return " " + "\n" * s.count("\n")
        else:
            return s

    pattern = re.compile(
        r'//.*?$|/\*.*?\*/|\'(?:\\.|[^\\\'])*\'|"(?:\\.|[^\\"])*"',
        re.DOTALL | re.MULTILINE,
    )
    return re.sub(pattern, replacer, text)


def strip_directives(text: str) -> str:
    """Blank out preprocessor lines (with their continuations), keeping line
    numbers intact. pycparser only accepts preprocessed input; macro uses
    still parse as ordinary function calls."""

    def replacer(match: Match[str]) -> str:
        return "\n" * match.group(0).count("\n")

    pattern = re.compile(r"^[ \t]*#(?:[^\n]*\\\n)*[^\n]*$", re.MULTILINE)
    return re.sub(pattern, replacer, text)


def parse_c(source: str) -> ca.FileAST:
    try:
        text = strip_directives(strip_comments(source))
        return CParser().parse(text, "<output>")
    except ParseError as e:
        position, _, msg = str(e).partition(": ")
        parts = position.split(":")
        posstr = ""
        if len(parts) >= 2:
            lineno = int(parts[1])
            posstr = f" at line {lineno}"
            if len(parts) >= 3:
                posstr += f", column {parts[2]}"
            try:
                line = source.split("\n")[lineno - 1].rstrip()
                posstr += "\n\n" + line
            except IndexError:
                posstr += "(out of bounds?)"
        raise TranspileFailure(f"Generated C failed to parse{posstr}: {msg}")


def check_c_syntax(source: str) -> None:
    """Raise TranspileFailure unless `source` parses, and defines `main`."""
    ast = parse_c(source)
    for item in ast.ext:
        if isinstance(item, ca.FuncDef) and item.decl.name == "main":
            return
    raise TranspileFailure("Generated C does not define main()")
