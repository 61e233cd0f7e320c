"""Run lint, format, type and test checks for ado-cli and print a JSON report.

Usage:
    python scripts/quality_gate.py              # everything
    python scripts/quality_gate.py --skip-tests # lint + types only
    python scripts/quality_gate.py --fix        # let ruff fix what it can first
"""

from __future__ import annotations

import argparse
import json
import re
import subprocess
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

MYPY_TARGETS = ["ado_cli/"]
PYTEST_ARGS = ["tests/", "-q", "--no-header", "--tb=short"]
MAX_OUTPUT_CHARS = 2000


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, "-m", *args],
        capture_output=True,
        text=True,
        cwd=str(ROOT),
        timeout=300,
    )


def _timed(check):
    t0 = time.monotonic()
    result = check()
    result["duration_s"] = round(time.monotonic() - t0, 1)
    return result


def _status(proc: subprocess.CompletedProcess) -> str:
    return "pass" if proc.returncode == 0 else "fail"


def check_ruff_lint(fix: bool = False) -> dict:
    if fix:
        _run("ruff", "check", "--fix", ".")
    r = _run("ruff", "check", ".")
    # Diagnostics look like "path:line:col: CODE message".
    errors = sum(1 for line in r.stdout.splitlines() if re.match(r"^\S+:\d+:\d+:", line))
    return {"status": _status(r), "errors": errors, "output": r.stdout.strip()}


def check_ruff_format() -> dict:
    r = _run("ruff", "format", "--check", ".")
    lines = r.stdout.splitlines() + r.stderr.splitlines()
    pending = sum(1 for line in lines if line.startswith("Would reformat"))
    return {"status": _status(r), "files_to_reformat": pending, "output": r.stdout.strip()}


def check_mypy() -> dict:
    r = _run("mypy", *MYPY_TARGETS)
    errors = sum(1 for line in r.stdout.splitlines() if ": error:" in line)
    return {"status": _status(r), "errors": errors, "output": r.stdout.strip()}


def check_pytest() -> dict:
    r = _run("pytest", *PYTEST_ARGS)
    counts = {"passed": 0, "failed": 0}
    # Summary line: "120 passed" or "2 failed, 118 passed in 1.2s"
    for line in reversed(r.stdout.strip().splitlines()):
        found = {k: re.search(rf"(\d+)\s+{k}", line) for k in counts}
        if any(found.values()):
            for key, match in found.items():
                if match:
                    counts[key] = int(match.group(1))
            break
    return {"status": _status(r), **counts, "output": r.stdout.strip()[-MAX_OUTPUT_CHARS:]}


def main() -> None:
    parser = argparse.ArgumentParser(description="Run ado-cli quality checks")
    parser.add_argument("--skip-tests", action="store_true", help="Skip pytest")
    parser.add_argument("--fix", action="store_true", help="Run ruff --fix before checking")
    args = parser.parse_args()

    steps = [
        ("ruff_lint", lambda: check_ruff_lint(fix=args.fix)),
        ("ruff_format", check_ruff_format),
        ("mypy", check_mypy),
    ]
    if not args.skip_tests:
        steps.append(("pytest", check_pytest))

    t0 = time.monotonic()
    checks: dict[str, dict] = {}
    for name, check in steps:
        print(f"Running {name}...", file=sys.stderr)
        checks[name] = _timed(check)
    if args.skip_tests:
        checks["pytest"] = {"status": "skip", "reason": "--skip-tests"}

    for check in checks.values():
        if check["status"] != "fail":
            check.pop("output", None)

    overall = "fail" if any(c["status"] == "fail" for c in checks.values()) else "pass"
    report = {
        "overall": overall,
        "checks": checks,
        "total_duration_s": round(time.monotonic() - t0, 1),
    }
    print(json.dumps(report, indent=2))
    sys.exit(0 if overall == "pass" else 1)


if __name__ == "__main__":
    main()
