import contextlib
import io
import shlex
import unittest
from pathlib import Path

from rm2c.main import parse_flags, run

E2E_DIR = Path(__file__).parent.parent / "end_to_end"
CRASH_STRING = "CRASHED\n"


def transpile(asm_file: Path) -> str:
    flags = [str(asm_file)]
    flags_path = asm_file.parent / f"{asm_file.stem}-flags.txt"
    if flags_path.is_file():
        flags.extend(shlex.split(flags_path.read_text()))
    options = parse_flags(flags)
    out = io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(io.StringIO()):
        returncode = run(options)
    return out.getvalue() if returncode == 0 else CRASH_STRING


class TestEndToEnd(unittest.TestCase):
    def test_recorded_outputs(self) -> None:
        asm_files = sorted(E2E_DIR.glob("*/*.asm"))
        self.assertTrue(asm_files)
        for asm_file in asm_files:
            with self.subTest(asm_file.relative_to(E2E_DIR).as_posix()):
                expected = asm_file.with_name(f"{asm_file.stem}-out.c").read_text()
                self.assertEqual(transpile(asm_file), expected)


if __name__ == "__main__":
    unittest.main()
