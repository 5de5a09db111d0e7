"""Module execution support for ``python -m changematch``."""

from __future__ import annotations

from changematch.cli import main

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
