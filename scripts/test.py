#!/usr/bin/env python3
"""Test runner script for sqlwatch.

Wraps pytest with the marker filters and coverage options used in CI.
"""

import argparse
import subprocess
import sys
from pathlib import Path
from typing import List, Optional


def run_command(cmd: List[str], *, cwd: Optional[Path] = None) -> int:
    """Run command and return exit code.

    Args:
        cmd: Command to run as list of strings
        cwd: Working directory for command

    Returns:
        Exit code from command
    """
    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=cwd)
    return result.returncode


def run_tests(
    test_type: str = "all",
    *,
    coverage: bool = False,
    verbose: bool = False,
    fail_fast: bool = False,
    html_report: bool = False,
    keyword: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> int:
    """Run tests with specified configuration.

    Args:
        test_type: Marker of the tests to run (all, unit, integration, database)
        coverage: Enable coverage reporting
        verbose: Enable verbose output
        fail_fast: Stop on first failure
        html_report: Generate HTML coverage report
        keyword: Only run tests matching this ``-k`` expression
        cwd: Project root to run pytest from

    Returns:
        Exit code from pytest
    """
    cmd = [sys.executable, "-m", "pytest"]

    if test_type != "all":
        cmd.extend(["-m", test_type])

    if keyword:
        cmd.extend(["-k", keyword])

    if coverage:
        cmd.extend([
            "--cov=src/sqlwatch",
            "--cov-report=term-missing:skip-covered",
            "--cov-report=xml:coverage.xml",
            "--cov-fail-under=90",
        ])

        if html_report:
            cmd.append("--cov-report=html:htmlcov")

    if verbose:
        cmd.append("-v")

    if fail_fast:
        cmd.append("-x")

    cmd.append("--durations=10")

    return run_command(cmd, cwd=cwd)


def main() -> int:
    """Main test runner function."""
    parser = argparse.ArgumentParser(
        description="sqlwatch test runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Run all tests
  %(prog)s --type unit              # Run unit tests only
  %(prog)s --type database -v       # Run tests that open real database files
  %(prog)s --coverage --html        # Run with coverage and HTML report
  %(prog)s -k registry              # Run registry tests only
        """
    )

    parser.add_argument(
        "--type", "-t",
        choices=["all", "unit", "integration", "database"],
        default="all",
        help="Type of tests to run (default: all)"
    )

    parser.add_argument(
        "--coverage", "-c",
        action="store_true",
        help="Enable coverage reporting"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--fail-fast", "-x",
        action="store_true",
        help="Stop on first failure"
    )

    parser.add_argument(
        "--html",
        action="store_true",
        help="Generate HTML coverage report"
    )

    parser.add_argument(
        "-k",
        dest="keyword",
        help="Only run tests matching the given expression"
    )

    args = parser.parse_args()

    project_root = Path(__file__).resolve().parent.parent

    return run_tests(
        test_type=args.type,
        coverage=args.coverage,
        verbose=args.verbose,
        fail_fast=args.fail_fast,
        html_report=args.html,
        keyword=args.keyword,
        cwd=project_root,
    )


if __name__ == "__main__":
    sys.exit(main())
