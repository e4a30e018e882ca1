#!/usr/bin/env python3
"""
Pre-commit hook to detect module-level mutable state in stencil modules.

Registries (types, engines, parsers, helpers, delimiters, layouts) belong
to a ``Template`` instance so two instances never see each other's
registrations. This check finds module-level state that would break that:

- ``_foo = None`` patterns (lazy singletons)
- ``foo = {}`` / ``[]`` / ``set()`` at module level (shared registries)
- ``global foo`` statements (state mutation)

A line can be allowed explicitly with a trailing ``# stencil: allow-global``.

Usage:
    python scripts/check_global_state.py [files...]
    python scripts/check_global_state.py --all  # Check all stencil/ files

Exit codes:
    0: No module-level mutable state found
    1: Module-level mutable state found
"""

from __future__ import annotations

import re
import sys
from fnmatch import fnmatch
from pathlib import Path

ALLOW_MARKER = "# stencil: allow-global"

# Patterns that indicate shared state at module level
GLOBAL_STATE_PATTERNS = [
    # Lazy singletons
    re.compile(r"^_?[a-z][a-z0-9_]*\s*(?::\s*[^=]+)?=\s*None\s*$"),
    # Empty collections used as registries
    re.compile(r"^_?[a-z][a-z0-9_]*\s*(?::\s*[^=]+)?=\s*(?:\{\}|\[\]|set\(\)|dict\(\)|list\(\))\s*$"),
]

# Rebinding module state from inside a function
GLOBAL_STATEMENT = re.compile(r"^\s+global\s+\w+")

EXCLUDE_PATTERNS = [
    "*/test_*.py",
    "*/__pycache__/*",
    "*/conftest.py",
]

SAFE_PATTERNS = [
    re.compile(r"^_?[A-Z][A-Z0-9_]*\s*(?::[^=]+)?="),  # Constants
    re.compile(r"^__all__\s*="),
    re.compile(r"^logger\s*="),  # Structured loggers are stateless wrappers
]


def is_excluded(path: Path) -> bool:
    path_str = str(path)
    return any(fnmatch(path_str, pattern) for pattern in EXCLUDE_PATTERNS)


def is_safe_pattern(line: str) -> bool:
    return any(pattern.match(line) for pattern in SAFE_PATTERNS)


def find_global_state(filepath: Path) -> list[tuple[int, str]]:
    """
    Find module-level mutable state in a Python file.

    Returns:
        List of (line_number, line_content) tuples
    """
    try:
        lines = filepath.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return []

    issues = []
    for i, line in enumerate(lines, 1):
        if ALLOW_MARKER in line:
            continue
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if line.startswith((" ", "\t")):
            if GLOBAL_STATEMENT.match(line):
                issues.append((i, stripped))
            continue
        if is_safe_pattern(stripped):
            continue
        if any(pattern.match(stripped) for pattern in GLOBAL_STATE_PATTERNS):
            issues.append((i, stripped))
    return issues


def check_file(filepath: Path) -> list[str]:
    """Return error messages for ``filepath``."""
    if is_excluded(filepath):
        return []
    return [
        f"{filepath}:{line_num}: Module-level mutable state\n"
        f"  {line_content}\n"
        f"  Fix: Move it onto the Template instance (or mark it '{ALLOW_MARKER}')"
        for line_num, line_content in find_global_state(filepath)
    ]


def main() -> int:
    args = sys.argv[1:]

    if not args or "--help" in args:
        print(__doc__)
        return 0

    if "--all" in args:
        stencil_dir = Path(__file__).parent.parent / "stencil"
        files = sorted(stencil_dir.rglob("*.py"))
    else:
        files = [Path(f) for f in args if f.endswith(".py")]

    all_errors = []
    for filepath in files:
        if filepath.exists():
            all_errors.extend(check_file(filepath))

    if all_errors:
        print("Module-level mutable state detected (instances would share it):\n")
        for error in all_errors:
            print(error)
            print()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
