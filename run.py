from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Sequence


def _bootstrap_src() -> None:
    src = Path(__file__).resolve().parent / "src"
    if str(src) not in sys.path:
        sys.path.insert(0, str(src))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Launch the shop CLI from a source checkout without installing it."""

    _bootstrap_src()

    from shopsim.cli import main as shop_main

    return shop_main(sys.argv[1:] if argv is None else argv)


if __name__ == "__main__":
    raise SystemExit(main())
