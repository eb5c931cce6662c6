import logging
import re
import typing
from typing import List

import attr

from .error import TranspileFailure
from .instruction import NUM_REGISTERS, Instruction, parse_instruction


HEADER_RE = re.compile(r"#ip\s+([+-]?[0-9]+)\s*")


@attr.s
class Program:
    ip: int = attr.ib()
    instructions: List[Instruction] = attr.ib(factory=list)

    def new_instruction(self, instruction: Instruction) -> None:
        self.instructions.append(instruction)

    def contains(self, address: int) -> bool:
        return 0 <= address < len(self.instructions)

    def __len__(self) -> int:
        return len(self.instructions)

    def __str__(self) -> str:
        body = "\n".join(str(instr) for instr in self.instructions)
        return f"#ip {self.ip}\n{body}"


def parse_header(line: str) -> int:
    match = HEADER_RE.fullmatch(line.strip())
    if match is None:
        raise TranspileFailure(
            f"Expected an `#ip <register>` header as the first line, found: {line.strip()}"
        )
    ip = int(match.group(1))
    if not (0 <= ip < NUM_REGISTERS):
        raise TranspileFailure(
            f"Instruction pointer register {ip} is out of range "
            f"(must be between 0 and {NUM_REGISTERS - 1})."
        )
    return ip


def parse_file(f: typing.TextIO) -> Program:
    program: typing.Optional[Program] = None

    for lineno, line in enumerate(f, 1):
        if program is None:
            if line.strip() == "":
                continue
            program = Program(ip=parse_header(line))
            logging.debug(f"Instruction pointer is bound to r[{program.ip}]")
            continue

        instr = parse_instruction(line)
        if instr is None:
            if line.strip():
                logging.debug(f"Skipping unparseable line {lineno}: {line.strip()}")
            continue
        program.new_instruction(instr)

    if program is None:
        raise TranspileFailure("Input is empty, expected an `#ip <register>` header.")
    return program
