from __future__ import annotations

import logging
import sys
from pathlib import Path


def _ensure_repo_root_on_path() -> None:
    """Ensure the repository root (parent of this package) is on ``sys.path``.

    If this module is executed as a script (``python type_ace/__main__.py``),
    the package may not be discoverable by Python. This helper inserts the
    parent directory of the package into ``sys.path`` so that imports resolve
    correctly.
    """
    pkg_dir = Path(__file__).resolve().parent
    repo_root_str = str(pkg_dir.parent)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


try:
    # Works when executed as a module: python -m type_ace
    from .app import run  # type: ignore[attr-defined]
    from .config import log_level_from_env  # type: ignore[attr-defined]
except ImportError:
    # Works when executed as a script.
    _ensure_repo_root_on_path()
    from type_ace.app import run  # type: ignore[attr-defined]
    from type_ace.config import log_level_from_env  # type: ignore[attr-defined]


def configure_logging() -> None:
    """Configure application-wide logging with a standard format."""
    logging.basicConfig(
        level=log_level_from_env(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main() -> int:
    """Entry point for running the typing test from the command line."""
    configure_logging()
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
