"""Script files on disk: locating input scripts and writing exports."""

from __future__ import annotations

from pathlib import Path

SCRIPT_SUFFIX = ".sql"


def find_scripts(scripts_dir: Path) -> list[Path]:
    """Return the ``*.sql`` files directly inside *scripts_dir*, sorted by name."""
    if not scripts_dir.is_dir():
        return []
    return sorted(
        p for p in scripts_dir.iterdir() if p.is_file() and p.suffix.lower() == SCRIPT_SUFFIX
    )


def find_script(scripts_dir: Path) -> Path | None:
    """Return the first script in *scripts_dir*, or None if there is none."""
    scripts = find_scripts(scripts_dir)
    return scripts[0] if scripts else None


def read_script(path: Path) -> str:
    # utf-8-sig: scripts saved by Windows editors often start with a BOM
    return path.read_text(encoding="utf-8-sig")


def write_script(path: Path, content: str) -> None:
    """Write *content* to *path* as UTF-8, creating parent directories.

    Line endings are written exactly as given.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(content)
