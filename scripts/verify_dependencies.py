#!/usr/bin/env python3
"""
Dependency Verification Script
Checks that the third-party stack and every personasync module import cleanly.
"""

import sys
from importlib import import_module

# Third-party libraries: (import name, display name)
DEPENDENCIES = [
    ("pydantic", "Pydantic"),
    ("structlog", "Structlog"),
    ("jsonlines", "Jsonlines"),
    ("httpx", "HTTPX"),
    ("tenacity", "Tenacity"),
    ("dotenv", "python-dotenv"),
    ("rich", "Rich"),
]

# Project modules, imported after the libraries they depend on
PROJECT_MODULES = [
    ("personasync.utils.logger", "Logger"),
    ("personasync.utils.kv_store", "Key-value store"),
    ("personasync.utils.dataset_loader", "Dataset loader"),
    ("personasync.utils.tts_client", "Text-to-speech client"),
    ("personasync.models.config", "Config models"),
    ("personasync.session", "User session"),
    ("personasync.dashboard", "Dashboard"),
]


def _check(entries: list[tuple[str, str]]) -> list[str]:
    failed = []
    for module_name, display_name in entries:
        try:
            import_module(module_name)
            print(f"[OK] {display_name}")
        except ImportError as e:
            print(f"[FAILED] {display_name}: {e}")
            failed.append(display_name)
    return failed


def verify_imports():
    """Verify all library and project imports; exit 0 on success, 1 otherwise."""
    print("Verifying dependencies...\n")
    failed = _check(DEPENDENCIES)

    print("\nVerifying project modules...\n")
    failed += _check(PROJECT_MODULES)

    print(f"\n{'='*60}")

    if failed:
        print(f"[ERROR] {len(failed)} imports failed:")
        for name in failed:
            print(f"   - {name}")
        sys.exit(1)

    print("[SUCCESS] All imports verified successfully!")
    sys.exit(0)


if __name__ == "__main__":
    verify_imports()
