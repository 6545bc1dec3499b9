#!/usr/bin/env python3
"""
Dependency Check
Imports every third-party package the portal needs and reports the ones missing.
"""

import sys
from importlib import import_module

# (import name, distribution name)
DEPENDENCIES = [
    ("pydantic", "pydantic"),
    ("email_validator", "email-validator"),
    ("structlog", "structlog"),
    ("jsonlines", "jsonlines"),
    ("jsonschema", "jsonschema"),
    ("jinja2", "Jinja2"),
    ("rich", "rich"),
    ("dotenv", "python-dotenv"),
    ("pytest", "pytest"),
]


def verify_imports():
    """Import each dependency; exit 0 if all load, 1 otherwise."""
    missing = []

    print("Checking portal dependencies...\n")

    for module_name, distribution in DEPENDENCIES:
        try:
            import_module(module_name)
            print(f"[OK] {distribution}")
        except ImportError as e:
            print(f"[FAILED] {distribution}: {e}")
            missing.append(distribution)

    print(f"\n{'='*60}")

    if missing:
        print(f"[ERROR] {len(missing)} packages missing, install with:")
        print(f"   pip install {' '.join(missing)}")
        sys.exit(1)
    print("[SUCCESS] All portal dependencies are installed")
    sys.exit(0)


if __name__ == "__main__":
    verify_imports()
