#!/usr/bin/env python3
# =============================================================================
# AIMP v1.0.0 -- CI CHECKS RUNNER
# File:   scripts/run_ci_checks.py
# =============================================================================
#
# PURPOSE
# -------
# Runs the full CI gate in two sequential stages:
#   Stage 1: pytest (all tests + coverage report for the aimp package)
#   Stage 2: config gate (shipped TRUST_MANIFEST.json == built-in defaults)
#
# Exit codes:
#   0 -- All stages passed.
#   1 -- Stage 1 (pytest) failed.
#   2 -- Stage 2 (config gate) failed.
#
# Usage:
#   python scripts/run_ci_checks.py
#
# Requires the test extra (pytest, pytest-cov).
# =============================================================================

from __future__ import annotations

import pathlib
import subprocess
import sys

_REPO_ROOT = pathlib.Path(__file__).parent.parent
_PYTHON    = sys.executable


def _separator(char: str = "=", width: int = 72) -> str:
    return char * width


def _run(cmd: list[str], label: str) -> int:
    """Run a subprocess command, stream stdout/stderr live, return exit code."""
    print(_separator())
    print(f"CI STAGE: {label}")
    print(f"CMD:      {' '.join(cmd)}")
    print(_separator("-"))
    sys.stdout.flush()
    return subprocess.run(cmd, cwd=str(_REPO_ROOT)).returncode


def _fail(stage: str, rc: int) -> None:
    print(_separator())
    print(f"CI RESULT: FAIL  [stage={stage}  exit_code={rc}]")
    print(f"Merge BLOCKED: {stage} stage did not pass.")
    print(_separator())
    sys.stdout.flush()


def main() -> int:
    print(_separator())
    print("AIMP CI GATE -- starting")
    print(_separator())
    sys.stdout.flush()

    pytest_rc = _run(
        [_PYTHON, "-m", "pytest", "--cov=aimp", "--cov-report=term-missing"],
        "pytest (tests + coverage)",
    )
    if pytest_rc != 0:
        _fail("pytest", pytest_rc)
        return 1
    print(_separator("-"))
    print("CI STAGE pytest: PASS")

    gate_rc = _run(
        [_PYTHON, "-m", "aimp.config.ci_config_gate"],
        "config gate (manifest vs built-in defaults)",
    )
    if gate_rc != 0:
        _fail("config", gate_rc)
        return 2
    print(_separator("-"))
    print("CI STAGE config: PASS")

    print(_separator())
    print("CI RESULT: PASS  [stages=pytest,config]")
    print("Merge permitted.")
    print(_separator())
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
