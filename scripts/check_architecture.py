#!/usr/bin/env python3
"""Architecture boundary checks."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
PACKAGE = ROOT / "src/uimf_converter"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _assert_no_imports(path: Path, banned: list[str]) -> None:
    text = _read(path)
    for token in banned:
        if token in text:
            raise SystemExit(f"Architecture violation in {path}: found '{token}'")


def main() -> None:
    """Run repository architecture boundary checks."""
    cli_path = PACKAGE / "cli/cli.py"
    _assert_no_imports(
        cli_path,
        [
            "import sqlite3",
            "import subprocess",
            "import shutil",
        ],
    )

    for layer in ("application", "conversion"):
        for path in (PACKAGE / layer).glob("*.py"):
            _assert_no_imports(
                path,
                [
                    "import typer",
                    "from typer",
                    "import sqlite3",
                ],
            )

    print("Architecture checks passed.")


if __name__ == "__main__":
    main()
