#!/usr/bin/env python3
"""
Dependency Verification Script
Imports every runtime and test dependency of poly-summaries and reports
which ones are missing.

Usage:
    python scripts/verify_dependencies.py          # runtime + test
    python scripts/verify_dependencies.py --runtime
"""

import sys
from importlib import import_module

# (import name, distribution name on the package index)
RUNTIME_DEPENDENCIES = [
    ("httpx", "httpx"),
    ("jinja2", "jinja2"),
    ("jsonlines", "jsonlines"),
    ("pydantic", "pydantic"),
    ("dotenv", "python-dotenv"),
    ("rich", "rich"),
    ("structlog", "structlog"),
    ("tenacity", "tenacity"),
]

TEST_DEPENDENCIES = [
    ("pytest", "pytest"),
    ("pytest_asyncio", "pytest-asyncio"),
    ("pytest_mock", "pytest-mock"),
]

DEPENDENCIES = RUNTIME_DEPENDENCIES + TEST_DEPENDENCIES


def find_missing(dependencies: list[tuple[str, str]]) -> list[str]:
    """Try each import and return distribution names that failed."""
    missing = []
    for module_name, distribution in dependencies:
        try:
            import_module(module_name)
            print(f"[OK] {distribution}")
        except ImportError as e:
            print(f"[FAILED] {distribution}: {e}")
            missing.append(distribution)
    return missing


def verify_imports(runtime_only: bool = False):
    """Verify dependency imports and exit 0 on success, 1 otherwise."""
    dependencies = RUNTIME_DEPENDENCIES if runtime_only else DEPENDENCIES

    print("Verifying dependencies...\n")
    missing = find_missing(dependencies)
    print(f"\n{'='*60}")

    if missing:
        print(f"[ERROR] {len(missing)} dependencies failed:")
        for name in missing:
            print(f"   - {name}")
        print(f"\nInstall with: pip install {' '.join(missing)}")
        sys.exit(1)

    print("[SUCCESS] All dependencies verified successfully!")
    sys.exit(0)


if __name__ == "__main__":
    verify_imports(runtime_only="--runtime" in sys.argv[1:])
