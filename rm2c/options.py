import contextlib
from dataclasses import dataclass
import enum
from typing import Iterator, List

DEFAULT_JUMP_TARGETS: List[int] = [1]


@dataclass(frozen=True)
class CodingStyle:
    class CommentStyle(enum.Enum):
        MULTILINE = "multiline"
        ONELINE = "oneline"

        def __str__(self) -> str:
            return self.value

    newline_after_function: bool
    newline_after_if: bool
    newline_before_else: bool
    comment_style: CommentStyle
    comment_column: int


@dataclass
class Options:
    filename: str
    # Offsets the restricted-mode dispatch may jump by. Empty means all jumps
    # go through the general `doJump` dispatch instead.
    jump_targets: List[int]
    asm_comments: bool
    check_syntax: bool
    debug: bool
    coding_style: "CodingStyle"

    def all_jumps(self) -> bool:
        return not self.jump_targets

    def formatter(self) -> "Formatter":
        return Formatter(self.coding_style)


DEFAULT_CODING_STYLE: CodingStyle = CodingStyle(
    newline_after_function=False,
    newline_after_if=False,
    newline_before_else=False,
    comment_style=CodingStyle.CommentStyle.MULTILINE,
    comment_column=52,
)


@dataclass
class Formatter:
    coding_style: CodingStyle = DEFAULT_CODING_STYLE
    indent_step: str = " " * 4
    extra_indent: int = 0

    def indent(self, line: str, indent: int = 0) -> str:
        return self.indent_step * max(indent + self.extra_indent, 0) + line

    @contextlib.contextmanager
    def indented(self) -> Iterator[None]:
        try:
            self.extra_indent += 1
            yield
        finally:
            self.extra_indent -= 1

    def with_comments(self, line: str, comments: List[str], *, indent: int = 0) -> str:
        """Indent `line` and append a list of `comments` joined with ';'"""
        base = self.indent(line, indent=indent)
        # If `comments` is empty; fall back to `Formatter.indent()` behavior
        if not comments:
            return base
        # Add padding to the style's `comment_column`, only if `line` is non-empty
        padding = ""
        if line:
            padding = max(1, self.coding_style.comment_column - len(base)) * " "
        if self.coding_style.comment_style == CodingStyle.CommentStyle.ONELINE:
            comment = f"// {'; '.join(comments)}"
        else:
            comment = f"/* {'; '.join(comments)} */"
        return f"{base}{padding}{comment}"
