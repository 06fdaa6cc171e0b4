"""Mint a development bearer token, standing in for the identity provider.

Usage: python scripts/issue_token.py <user_id> <student|faculty|admin|staff>
"""
from __future__ import annotations

import importlib
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import get_settings_module

from campus_attendance.auth.identity import TokenVerifier
from campus_attendance.core.enums import Role


def main(argv: list[str]) -> int:
    if len(argv) != 2:
        print(__doc__.strip())
        return 2
    user_id, role_s = argv
    try:
        role = Role(role_s)
    except ValueError:
        print(f"Unknown role: {role_s}")
        return 2

    settings = importlib.import_module(get_settings_module())
    verifier = TokenVerifier(settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    print(verifier.issue(user_id, role))
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
