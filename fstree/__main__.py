"""Module entrypoint for ``python -m fstree``.

All argument parsing happens in ``fstree.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
