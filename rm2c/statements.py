from dataclasses import dataclass, field
from typing import List, Optional, Union

from .options import Formatter


def label_for_index(index: int) -> str:
    return f"l{index}"


@dataclass
class SimpleStatement:
    contents: str

    def format(self, fmt: Formatter) -> str:
        return fmt.indent(self.contents)


@dataclass
class IfElseStatement:
    condition: str
    if_body: "Body"
    else_body: Optional["Body"] = None

    def format(self, fmt: Formatter) -> str:
        space = fmt.indent("")
        after_ifelse = f"\n{space}" if fmt.coding_style.newline_after_if else " "
        before_else = f"\n{space}" if fmt.coding_style.newline_before_else else " "
        with fmt.indented():
            if_str = "\n".join(
                [
                    f"{space}if ({self.condition}){after_ifelse}{{",
                    self.if_body.format(fmt),  # has its own indentation
                    f"{space}}}",
                ]
            )
        if self.else_body is not None and not self.else_body.is_empty():
            sub_if = self.else_body.get_lone_if_statement()
            if sub_if:
                sub_if_str = sub_if.format(fmt).lstrip()
                else_str = f"{before_else}else {sub_if_str}"
            else:
                with fmt.indented():
                    else_str = "\n".join(
                        [
                            f"{before_else}else{after_ifelse}{{",
                            self.else_body.format(fmt),
                            f"{space}}}",
                        ]
                    )
            if_str = if_str + else_str
        return if_str


@dataclass
class LabelStatement:
    index: int
    comments: List[str] = field(default_factory=list)

    def format(self, fmt: Formatter) -> str:
        # Labels sit one level left of the statements they name
        return fmt.with_comments(
            f"{label_for_index(self.index)}:", self.comments, indent=-1
        )


Statement = Union[
    SimpleStatement,
    IfElseStatement,
    LabelStatement,
]


@dataclass
class Body:
    statements: List[Statement] = field(default_factory=list)

    def extend(self, other: "Body") -> None:
        """Add the contents of `other` into ourselves"""
        self.statements.extend(other.statements)

    def add_statement(self, statement: Statement) -> None:
        self.statements.append(statement)

    def is_empty(self) -> bool:
        return not self.statements

    def get_lone_if_statement(self) -> Optional[IfElseStatement]:
        """If the body consists solely of one IfElseStatement, return it, else None."""
        if len(self.statements) == 1 and isinstance(
            self.statements[0], IfElseStatement
        ):
            return self.statements[0]
        return None

    def format(self, fmt: Formatter) -> str:
        return "\n".join(statement.format(fmt) for statement in self.statements)
