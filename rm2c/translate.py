"""Translation of register machine instructions into C statements.

Every instruction becomes one labeled block. Instructions that write the
instruction pointer register are jumps; their targets are resolved statically
where the operands allow it, and otherwise go through a runtime dispatch."""
from dataclasses import dataclass
from enum import Enum
import logging
from typing import Callable, Dict, List, Optional, Tuple

from .error import UnsupportedJump
from .instruction import Instruction, Opcode, Operand
from .options import Options
from .parse_file import Program
from .statements import (
    Body,
    IfElseStatement,
    SimpleStatement,
    label_for_index,
)

# Temporary holding a computed jump value in the general dispatch
JUMP_VAR = "jump"

EXPR_TEMPLATES: Dict[Opcode, str] = {
    Opcode.ADDR: "{a} + {b}",
    Opcode.ADDI: "{a} + {b}",
    Opcode.MULR: "{a} * {b}",
    Opcode.MULI: "{a} * {b}",
    Opcode.BANR: "{a} & {b}",
    Opcode.BANI: "{a} & {b}",
    Opcode.BORR: "{a} | {b}",
    Opcode.BORI: "{a} | {b}",
    Opcode.SETR: "{a}",
    Opcode.SETI: "{a}",
    Opcode.GTIR: "{a} > {b} ? 1 : 0",
    Opcode.GTRI: "{a} > {b} ? 1 : 0",
    Opcode.GTRR: "{a} > {b} ? 1 : 0",
    Opcode.EQIR: "{a} == {b} ? 1 : 0",
    Opcode.EQRI: "{a} == {b} ? 1 : 0",
    Opcode.EQRR: "{a} == {b} ? 1 : 0",
}


def format_register(reg: int) -> str:
    return f"r[{reg}]"


def render_operand(value: int, kind: Operand, ip: int, index: int) -> str:
    if kind == Operand.REGISTER:
        # While an instruction executes, the ip register holds its address
        if value == ip:
            return str(index)
        return format_register(value)
    return str(value)


def render_expr(instr: Instruction, ip: int, index: int) -> str:
    """Render the value `instr` computes, as a C expression.

    Reads of the ip register are replaced by `index`, the instruction's own
    address, which is what makes most jump targets static."""
    a_kind, b_kind = instr.signature()
    return EXPR_TEMPLATES[instr.opcode].format(
        a=render_operand(instr.a, a_kind, ip, index),
        b=render_operand(instr.b, b_kind, ip, index),
    )


class JumpShape(Enum):
    SELF_DOUBLE = "addr-self"
    RELATIVE_REG_B = "addr-other-b"
    RELATIVE_REG_A = "addr-other-a"
    RELATIVE_IMM = "addi"
    SCALED_IMM = "muli"
    SELF_SQUARE = "mulr-self"
    ABSOLUTE_IMM = "seti"
    COMPUTED = "computed"


# First match wins: (opcode, a == c, b == c, shape), None matching either.
# Rows overlap, e.g. `addr` with both operands equal to c also matches the
# single-operand rows below it.
JUMP_SHAPES: List[Tuple[Opcode, Optional[bool], Optional[bool], JumpShape]] = [
    (Opcode.ADDR, True, True, JumpShape.SELF_DOUBLE),
    (Opcode.ADDR, True, None, JumpShape.RELATIVE_REG_B),
    (Opcode.ADDR, None, True, JumpShape.RELATIVE_REG_A),
    (Opcode.ADDI, True, None, JumpShape.RELATIVE_IMM),
    (Opcode.MULI, True, None, JumpShape.SCALED_IMM),
    (Opcode.MULR, True, True, JumpShape.SELF_SQUARE),
    (Opcode.SETI, None, None, JumpShape.ABSOLUTE_IMM),
]

# Closed-form targets (the address executed next) of the static shapes
STATIC_TARGETS: Dict[JumpShape, Callable[[Instruction, int], int]] = {
    JumpShape.SELF_DOUBLE: lambda instr, i: 2 * i + 1,
    JumpShape.RELATIVE_IMM: lambda instr, i: i + instr.b + 1,
    JumpShape.SCALED_IMM: lambda instr, i: i * instr.b + 1,
    JumpShape.SELF_SQUARE: lambda instr, i: i * i + 1,
    JumpShape.ABSOLUTE_IMM: lambda instr, i: instr.a + 1,
}


def classify_jump(instr: Instruction) -> JumpShape:
    key = (instr.opcode, instr.a == instr.c, instr.b == instr.c)
    for opcode, a_is_ip, b_is_ip, shape in JUMP_SHAPES:
        if (
            opcode == key[0]
            and (a_is_ip is None or a_is_ip == key[1])
            and (b_is_ip is None or b_is_ip == key[2])
        ):
            return shape
    return JumpShape.COMPUTED


def static_jump_target(instr: Instruction, index: int) -> Optional[int]:
    shape = classify_jump(instr)
    if shape not in STATIC_TARGETS:
        return None
    return STATIC_TARGETS[shape](instr, index)


@dataclass
class Context:
    program: Program
    options: Options

    def finalize(self, value: str) -> Body:
        """Store the final ip, print the registers, and exit successfully."""
        return Body(
            [
                SimpleStatement(f"{format_register(self.program.ip)} = {value};"),
                SimpleStatement("printRegs(r);"),
                SimpleStatement("return 0;"),
            ]
        )

    def transfer(self, target: int) -> Body:
        # Leaving the program is how it halts
        if not self.program.contains(target):
            return self.finalize(str(target))
        return Body([SimpleStatement(f"goto {label_for_index(target)};")])


def jump_offsets(jump_targets: List[int]) -> List[int]:
    offsets: List[int] = []
    for offset in jump_targets:
        if offset != 0 and offset not in offsets:
            offsets.append(offset)
    return offsets


def offset_dispatch(context: Context, index: int, reg: int) -> Body:
    """Jump by the value of `reg`, which must be 0 or one of the configured
    offsets. Any other value aborts the generated program via `badJump`."""
    reg_str = format_register(reg)
    chain = Body([SimpleStatement(f"badJump({index}, {reg_str});")])
    for offset in reversed(jump_offsets(context.options.jump_targets)):
        chain = Body(
            [
                IfElseStatement(
                    f"{reg_str} == {offset}",
                    context.transfer(index + offset + 1),
                    chain,
                )
            ]
        )
    return Body(
        [IfElseStatement(f"{reg_str} == 0", context.transfer(index + 1), chain)]
    )


def generic_dispatch(expr: str) -> Body:
    return Body(
        [
            SimpleStatement(f"{JUMP_VAR} = {expr};"),
            SimpleStatement(f"doJump({JUMP_VAR});"),
        ]
    )


def translate_jump(context: Context, instr: Instruction, index: int) -> Body:
    shape = classify_jump(instr)
    restricted = not context.options.all_jumps()
    logging.debug(f"l{index}: {instr} is a {shape.value} jump")

    if shape in STATIC_TARGETS:
        return context.transfer(STATIC_TARGETS[shape](instr, index))
    if restricted and shape == JumpShape.RELATIVE_REG_B:
        return offset_dispatch(context, index, instr.b)
    if restricted and shape == JumpShape.RELATIVE_REG_A:
        return offset_dispatch(context, index, instr.a)
    if restricted:
        raise UnsupportedJump(instr, index)
    return generic_dispatch(render_expr(instr, context.program.ip, index))


def translate_instruction(context: Context, instr: Instruction, index: int) -> Body:
    ip = context.program.ip
    if instr.c == ip:
        return translate_jump(context, instr, index)
    return Body(
        [
            SimpleStatement(
                f"{format_register(instr.c)} = {render_expr(instr, ip, index)};"
            )
        ]
    )

