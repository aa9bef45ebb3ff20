"""Wrapper for the hilbertsim analysis CLI."""

from __future__ import annotations

from hilbertsim.cli import run_main


def main() -> int:
    return run_main()


if __name__ == "__main__":
    raise SystemExit(main())
