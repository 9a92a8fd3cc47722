"""Run the exporter's quality checks.

Usage: python scripts/check.py [check ...]

Without arguments every check runs. Pass names (ruff, mypy, vulture,
pytest) to run a subset.
"""

import subprocess
import sys

CHECKS = {
    "ruff": ["ruff", "check", "switchbot_exporter", "tests", "scripts"],
    "mypy": ["mypy", "switchbot_exporter"],
    "vulture": ["vulture", "switchbot_exporter/", "vulture_whitelist.py", "--min-confidence", "80"],
    "pytest": ["pytest", "-q"],
}


def main(argv: list[str]) -> int:
    selected = argv or list(CHECKS)
    unknown = [name for name in selected if name not in CHECKS]
    if unknown:
        print(f"Unknown check(s): {', '.join(unknown)}. Choose from {', '.join(CHECKS)}.")
        return 2

    failed = [name for name in selected if subprocess.run(CHECKS[name]).returncode != 0]

    if failed:
        print(f"FAILED: {', '.join(failed)}")
        return 1
    print(f"Passed: {', '.join(selected)}")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
