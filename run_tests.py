#!/usr/bin/env python3
import argparse
import attr
import contextlib
import difflib
import io
import logging
import re
import shlex
import sys
from coverage import Coverage  # type: ignore
from pathlib import Path
from typing import Any, List, Optional, Pattern

from rm2c.options import Options

CRASH_STRING = "CRASHED\n"


@attr.s
class TestOptions:
    should_overwrite: bool = attr.ib()
    diff_context: int = attr.ib()
    filter_re: Optional[Pattern[str]] = attr.ib()
    coverage: Any = attr.ib()


@attr.s
class TestCase:
    name: str = attr.ib()
    asm_file: Path = attr.ib()
    output_file: Path = attr.ib()
    flags_path: Optional[Path] = attr.ib(default=None)


def set_up_logging(debug: bool) -> None:
    logging.basicConfig(
        format="[%(levelname)s] %(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


def get_test_flags(flags_path: Optional[Path]) -> List[str]:
    if flags_path is None or not flags_path.is_file():
        return []
    return shlex.split(flags_path.read_text())


def transpile_and_capture_output(options: Options) -> str:
    # This import is deferred so it can be profiled by the coverage tool
    from rm2c.main import run as transpile

    out_string = io.StringIO()
    err_string = io.StringIO()
    with contextlib.redirect_stdout(out_string), contextlib.redirect_stderr(
        err_string
    ):
        returncode = transpile(options)
    if returncode != 0:
        return CRASH_STRING
    return out_string.getvalue()


def transpile_test_case(test_case: TestCase) -> str:
    # This import is deferred so it can be profiled by the coverage tool
    from rm2c.main import parse_flags

    test_flags = [str(test_case.asm_file)]
    test_flags.extend(get_test_flags(test_case.flags_path))
    options = parse_flags(test_flags)
    return transpile_and_capture_output(options)


def transpile_and_compare(test_case: TestCase, test_options: TestOptions) -> bool:
    logging.info(f"Running test: {test_case.name}")
    logging.debug(
        f"Transpiling {test_case.asm_file}"
        + (f" into {test_case.output_file}" if test_options.should_overwrite else "")
    )
    try:
        original_contents = test_case.output_file.read_text()
    except FileNotFoundError:
        if not test_options.should_overwrite:
            logging.error(f"{test_case.output_file} does not exist. Skipping.")
            return True
        logging.info(f"{test_case.output_file} does not exist. Creating...")
        original_contents = "(file did not exist)"

    final_contents = transpile_test_case(test_case)

    if test_options.should_overwrite:
        test_case.output_file.parent.mkdir(parents=True, exist_ok=True)
        test_case.output_file.write_text(final_contents)

    changed = final_contents != original_contents
    if changed:
        logging.info(
            "\n".join(
                [
                    f"Output of {test_case.asm_file} changed! Diff:",
                    *difflib.unified_diff(
                        original_contents.splitlines(),
                        final_contents.splitlines(),
                        n=test_options.diff_context,
                    ),
                ]
            )
        )
    return not changed


def create_e2e_tests(e2e_top_dir: Path) -> List[TestCase]:
    cases: List[TestCase] = []
    for asm_file in sorted(e2e_top_dir.glob("*/*.asm")):
        output_file = asm_file.parent.joinpath(asm_file.stem + "-out.c")
        flags_path = asm_file.parent.joinpath(asm_file.stem + "-flags.txt")
        name = f"e2e:{asm_file.relative_to(e2e_top_dir)}"

        cases.append(
            TestCase(
                name=name,
                asm_file=asm_file,
                output_file=output_file,
                flags_path=flags_path,
            )
        )
    return cases


def main(options: TestOptions) -> int:
    e2e_top_dir = Path(__file__).parent / "tests" / "end_to_end"
    test_cases = create_e2e_tests(e2e_top_dir)

    ret = 0
    passed, skipped, failed = 0, 0, 0
    for test_case in test_cases:
        if options.filter_re is not None:
            if not options.filter_re.search(test_case.name):
                skipped += 1
                continue

        if transpile_and_compare(test_case, options):
            passed += 1
        else:
            failed += 1
            if not options.should_overwrite:
                ret = 1

    logging.info(
        f"Test summary: {passed} passed, {skipped} skipped, {failed} failed, {passed + skipped + failed} total"
    )
    return ret


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Run and record end-to-end transpiler tests."
    )
    parser.add_argument(
        "--debug", dest="debug", help="print debug info", action="store_true"
    )
    parser.add_argument(
        "--diff-context",
        dest="diff_context",
        default=3,
        type=int,
        help=("Number of lines of context to print with in diff output."),
    )
    parser.add_argument(
        "--overwrite",
        dest="should_overwrite",
        action="store_true",
        help=(
            "overwrite the contents of the test output files. "
            "Do this once before committing."
        ),
    )
    parser.add_argument(
        "--filter",
        dest="filter_re",
        type=lambda x: re.compile(x),
        help=("Only run tests matching this regular expression."),
    )
    cov_group = parser.add_argument_group("Coverage")
    cov_group.add_argument(
        "--coverage",
        dest="coverage",
        action="store_true",
        help="Compute code coverage for tests",
    )
    cov_group.add_argument(
        "--coverage-html",
        dest="coverage_html",
        help="Output coverage HTML report to directory",
        default="htmlcov/",
    )
    cov_group.add_argument(
        "--coverage-emit-data",
        dest="coverage_emit_data",
        action="store_true",
        help="Emit a .coverage data file",
    )
    args = parser.parse_args()
    set_up_logging(args.debug)

    cov = None
    if args.coverage:
        logging.info("Computing code coverage.")
        coverage_data_file = None
        if args.coverage_emit_data:
            coverage_data_file = ".coverage"
            logging.info(f"Writing coverage data to {coverage_data_file}")
        cov = Coverage(include="rm2c/*", data_file=coverage_data_file, branch=True)
        cov.start()

    if args.should_overwrite:
        logging.info("Overwriting test output files.")

    options = TestOptions(
        should_overwrite=args.should_overwrite,
        diff_context=args.diff_context,
        filter_re=args.filter_re,
        coverage=cov,
    )
    ret = main(options)

    if cov is not None:
        cov.stop()
        cov.html_report(
            directory=args.coverage_html, show_contexts=True, skip_empty=True
        )
        logging.info(f"Wrote html to {args.coverage_html}")

    sys.exit(ret)
