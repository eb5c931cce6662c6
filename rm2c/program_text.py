from typing import List

from .instruction import NUM_REGISTERS
from .options import Formatter, Options
from .parse_file import Program
from .statements import Body, LabelStatement, label_for_index
from .translate import Context, JUMP_VAR, format_register, translate_instruction

INCLUDES = ["stdio.h", "stdlib.h"]


def format_macro(header: str, lines: List[str], fmt: Formatter) -> str:
    """Format a multi-line #define, with one continuation per line."""
    with fmt.indented():
        body = [fmt.indent(line) for line in lines]
    return " \\\n".join([f"#define {header}", *body])


def bad_jump_macro(fmt: Formatter) -> str:
    message = (
        "Made a jump at l%d with an unsupported offset of %ld.  "
        "Transpile with -allJumps to enable full jump support.\\n"
    )
    return format_macro(
        "badJump(line, reg)",
        [
            "do {",
            fmt.indent_step
            + f'fprintf(stderr, "{message}", (line), (long)(reg));',
            fmt.indent_step + "abort();",
            "} while (0)",
        ],
        fmt,
    )


def do_jump_macro(program: Program, fmt: Formatter) -> str:
    """Switch over every value the ip register can hold before its increment.

    Any value whose successor lies outside the program ends the run."""
    lines = ["switch (x) {"]
    for index in range(len(program)):
        lines.append(f"case {index - 1}: goto {label_for_index(index)};")
    lines.append(
        f"default: {format_register(program.ip)} = (x) + 1; printRegs(r); return 0;"
    )
    lines.append("}")
    return format_macro("doJump(x)", lines, fmt)


def print_regs_text(fmt: Formatter) -> str:
    brace = "\n" if fmt.coding_style.newline_after_function else " "
    formats = " ".join(["%ld"] * NUM_REGISTERS)
    regs = ", ".join(format_register(reg) for reg in range(NUM_REGISTERS))
    with fmt.indented():
        body = fmt.indent(f'printf("{formats}\\n", {regs});')
    return f"void printRegs(long *r){brace}{{\n{body}\n}}"


def build_body(program: Program, options: Options) -> Body:
    """Emit one labeled block per instruction, then fall off the end of the
    program into a final exit."""
    context = Context(program=program, options=options)
    body = Body()
    for index, instr in enumerate(program.instructions):
        comments = [str(instr)] if options.asm_comments else []
        body.add_statement(LabelStatement(index, comments))
        body.extend(translate_instruction(context, instr, index))
    body.extend(context.finalize(str(len(program))))
    return body


def get_program_text(program: Program, options: Options) -> str:
    """Translate `program` into a complete C translation unit.

    Raises UnsupportedJump if a jump cannot be expressed in restricted mode,
    before any text is produced."""
    fmt = options.formatter()
    body = build_body(program, options)

    lines: List[str] = [f"#include <{header}>" for header in INCLUDES]
    lines.append("")
    if options.all_jumps():
        lines.append(do_jump_macro(program, fmt))
    else:
        lines.append(bad_jump_macro(fmt))
    lines.append("")
    lines.append(print_regs_text(fmt))
    lines.append("")

    brace = "\n" if fmt.coding_style.newline_after_function else " "
    for_brace = "\n" + fmt.indent("", 1) if fmt.coding_style.newline_after_if else " "
    lines.append(f"int main(int argc, char **argv){brace}{{")
    with fmt.indented():
        lines.append(fmt.indent(f"long r[{NUM_REGISTERS}] = {{0}};"))
        if options.all_jumps():
            lines.append(fmt.indent(f"long {JUMP_VAR};"))
        lines.append(fmt.indent("int i;"))
        lines.append("")
        loop = f"for (i = 0; i < argc - 1 && i < {NUM_REGISTERS}; i++)"
        lines.append(fmt.indent(f"{loop}{for_brace}{{"))
        with fmt.indented():
            lines.append(fmt.indent("r[i] = strtol(argv[i + 1], NULL, 10);"))
        lines.append(fmt.indent("}"))
        lines.append("")
        lines.append(body.format(fmt))
    lines.append("}")
    return "\n".join(lines)
