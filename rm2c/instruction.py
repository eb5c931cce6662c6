"""Functions and classes for parsing a single register machine instruction."""
from dataclasses import dataclass
from enum import Enum
import re
from typing import Dict, List, Optional, Tuple

NUM_REGISTERS = 6

INT_RE = re.compile(r"[+-]?[0-9]+")


class Opcode(Enum):
    ADDR = "addr"
    ADDI = "addi"
    MULR = "mulr"
    MULI = "muli"
    BANR = "banr"
    BANI = "bani"
    BORR = "borr"
    BORI = "bori"
    SETR = "setr"
    SETI = "seti"
    GTIR = "gtir"
    GTRI = "gtri"
    GTRR = "gtrr"
    EQIR = "eqir"
    EQRI = "eqri"
    EQRR = "eqrr"

    def __str__(self) -> str:
        return self.value


class Operand(Enum):
    REGISTER = "register"
    IMMEDIATE = "immediate"
    UNUSED = "unused"


REG = Operand.REGISTER
IMM = Operand.IMMEDIATE
NONE = Operand.UNUSED

# How each opcode reads its `a` and `b` operands.
OPCODE_SIGNATURES: Dict[Opcode, Tuple[Operand, Operand]] = {
    Opcode.ADDR: (REG, REG),
    Opcode.ADDI: (REG, IMM),
    Opcode.MULR: (REG, REG),
    Opcode.MULI: (REG, IMM),
    Opcode.BANR: (REG, REG),
    Opcode.BANI: (REG, IMM),
    Opcode.BORR: (REG, REG),
    Opcode.BORI: (REG, IMM),
    Opcode.SETR: (REG, NONE),
    Opcode.SETI: (IMM, NONE),
    Opcode.GTIR: (IMM, REG),
    Opcode.GTRI: (REG, IMM),
    Opcode.GTRR: (REG, REG),
    Opcode.EQIR: (IMM, REG),
    Opcode.EQRI: (REG, IMM),
    Opcode.EQRR: (REG, REG),
}


@dataclass(frozen=True)
class Instruction:
    opcode: Opcode
    a: int
    b: int
    c: int

    def signature(self) -> Tuple[Operand, Operand]:
        return OPCODE_SIGNATURES[self.opcode]

    def __str__(self) -> str:
        return f"{self.opcode} {self.a} {self.b} {self.c}"


def parse_int(token: str) -> Optional[int]:
    if not INT_RE.fullmatch(token):
        return None
    return int(token)


def parse_instruction(line: str) -> Optional[Instruction]:
    """Parse one line of the form `<opcode> <a> <b> <c>`.

    Returns None if the line is not an instruction: too few tokens, an
    unknown opcode, or a non-integer operand. Anything after the fourth
    token is ignored."""
    tokens: List[str] = line.split()
    if len(tokens) < 4:
        return None
    try:
        opcode = Opcode(tokens[0])
    except ValueError:
        return None
    operands = [parse_int(token) for token in tokens[1:4]]
    a, b, c = operands
    if a is None or b is None or c is None:
        return None
    return Instruction(opcode=opcode, a=a, b=b, c=c)
