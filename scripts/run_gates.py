#!/usr/bin/env python3
"""Run the s3db quality gates without requiring GNU make.

Stops at the first failing gate and exits with its return code.

Usage:
    python scripts/run_gates.py            # Run all gates
    python scripts/run_gates.py format     # ruff format --check
    python scripts/run_gates.py lint       # ruff check
    python scripts/run_gates.py typecheck  # mypy over src/s3db
    python scripts/run_gates.py test       # pytest
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).parent.parent


def run_command(name: str, cmd: list[str]) -> None:
    """Run one gate command, raising CalledProcessError on failure."""
    print(f"\n{'=' * 60}")
    print(f"Running: {name}")
    print(f"Command: {' '.join(cmd)}")
    print("=" * 60)

    subprocess.run(cmd, cwd=REPO_ROOT, check=True)

    print(f"PASSED: {name}")


def gate_format() -> None:
    """Check formatting with ruff."""
    run_command("Format (ruff)", ["ruff", "format", "--check", "."])


def gate_lint() -> None:
    """Run ruff check."""
    run_command("Lint (ruff)", ["ruff", "check", "."])


def gate_typecheck() -> None:
    """Run mypy type checking."""
    run_command(
        "Typecheck (mypy)",
        [sys.executable, "-m", "mypy", "src/s3db", "--ignore-missing-imports"],
    )


def gate_test() -> None:
    """Run pytest."""
    run_command("Test (pytest)", [sys.executable, "-m", "pytest", "-q"])


GATES = {
    "format": gate_format,
    "lint": gate_lint,
    "typecheck": gate_typecheck,
    "test": gate_test,
}


def main() -> int:
    gates = list(GATES.values())
    if len(sys.argv) > 1 and sys.argv[1].lower() not in ("all", "check"):
        gate_name = sys.argv[1].lower()
        if gate_name not in GATES:
            print(f"Unknown gate: {gate_name}")
            print(f"Available gates: {', '.join(GATES)}, all")
            return 1
        gates = [GATES[gate_name]]

    try:
        for gate_fn in gates:
            gate_fn()
    except subprocess.CalledProcessError as e:
        print(f"\nGATE FAILED (exit code {e.returncode})")
        return e.returncode

    print("\nALL GATES PASSED")
    return 0


if __name__ == "__main__":
    sys.exit(main())
