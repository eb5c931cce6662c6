import io
import unittest

from rm2c.c_check import check_c_syntax, strip_comments, strip_directives
from rm2c.error import TranspileFailure
from rm2c.main import parse_flags
from rm2c.parse_file import parse_file
from rm2c.program_text import get_program_text

PROGRAM = """#ip 4
addi 4 16 4
seti 1 8 1
seti 1 5 3
mulr 1 3 2
eqrr 2 5 2
addr 2 4 4
addi 4 1 4
addr 1 0 0
addi 3 1 3
gtrr 3 5 2
addr 4 2 4
seti 2 3 4
addi 1 1 1
gtrr 1 5 2
addr 2 4 4
seti 1 6 4
mulr 4 4 4
addi 5 2 5
mulr 5 5 5
mulr 4 5 5
muli 5 11 5
"""


class TestCheckSyntax(unittest.TestCase):
    def test_strip_directives(self) -> None:
        source = "#include <x.h>\n#define f(x) \\\n    (x) \\\n    + 1\nint y;\n"
        stripped = strip_directives(source)
        self.assertEqual(stripped, "\n\n\n\nint y;\n")

    def test_generated_programs_parse(self) -> None:
        for flags in ([], ["--all-jumps"], ["--jumps", "1", "2"], ["--allman"]):
            program = parse_file(io.StringIO(PROGRAM))
            text = get_program_text(program, parse_flags(["test.asm", *flags]))
            check_c_syntax(text)

    def test_strip_comments(self) -> None:
        source = 'l0: /* seti 5 0 0 */\n    f("/* kept */ // kept"); // gone\n/* a\nb */ int y;\n'
        stripped = strip_comments(source)
        self.assertEqual(stripped, 'l0:  \n    f("/* kept */ // kept");  \n \n int y;\n')

    def test_generated_programs_with_comments_parse(self) -> None:
        for style in ("multiline", "oneline"):
            program = parse_file(io.StringIO(PROGRAM))
            flags = ["test.asm", "--asm-comments", "--comment-style", style]
            text = get_program_text(program, parse_flags(flags))
            check_c_syntax(text)

    def test_invalid_c(self) -> None:
        with self.assertRaises(TranspileFailure) as cm:
            check_c_syntax("#include <stdio.h>\nint main(void) {\n    r[0] = ;\n}\n")
        self.assertIn("line 3", str(cm.exception))

    def test_missing_main(self) -> None:
        with self.assertRaises(TranspileFailure):
            check_c_syntax("void printRegs(long *r) {\n}\n")


if __name__ == "__main__":
    unittest.main()
