#!/usr/bin/env python
"""
Lint script for teafinder project.
Runs isort, black and flake8 checks, then the unit tests.
Integration tests are excluded; they need a Google Maps API key.
"""

import subprocess
import sys
from pathlib import Path

MAX_LINE_LENGTH = "100"


def run_command(cmd, description):
    """Run a command and report whether it passed."""
    print(f"\n=== Running {description} ===")
    result = subprocess.run(cmd, capture_output=True, text=True)

    if result.stdout:
        print(result.stdout)
    if result.stderr:
        print(result.stderr, file=sys.stderr)

    if result.returncode != 0:
        print(f"{description} failed with exit code {result.returncode}")
        return False

    print(f"{description} passed!")
    return True


def main():
    project_root = Path(__file__).parent.parent
    src_dirs = [
        project_root / "src" / "teafinder",
        project_root / "tests",
        project_root / "integration_tests",
        project_root / "scripts",
    ]
    src_paths = [str(path) for path in src_dirs if path.exists()]

    checks = [
        (
            ["isort", "--check-only", "--profile", "black", "--line-length", MAX_LINE_LENGTH]
            + src_paths,
            "isort import order check",
        ),
        (["black", "--check", "--line-length", MAX_LINE_LENGTH] + src_paths, "black formatting check"),
        (["flake8", "--max-line-length", MAX_LINE_LENGTH] + src_paths, "flake8 linting check"),
    ]
    # Run every check so one failure doesn't hide the others
    results = [run_command(cmd, description) for cmd, description in checks]

    print("\n=== Running unit tests ===")
    test_result = subprocess.run(["pytest", "tests"], cwd=project_root)

    return all(results) and test_result.returncode == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
