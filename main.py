"""Run arduscope straight from a source checkout.

Adds ``src/`` to the import path and, unless ``--config`` is given, picks up
an ``arduscope.yaml`` placed next to this file.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent
SRC_DIR = REPO_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from arduscope.gui.application import main as run_gui_main

LOCAL_CONFIG = REPO_ROOT / "arduscope.yaml"


def with_local_config(argv: Sequence[str], config_path: Path = LOCAL_CONFIG) -> list[str]:
    """Return ``argv`` with ``--config <config_path>`` added if the file exists."""
    args = list(argv)
    has_config = any(a == "--config" or a.startswith("--config=") for a in args[1:])
    if has_config or not config_path.is_file():
        return args
    return [args[0], "--config", str(config_path), *args[1:]]


if __name__ == "__main__":
    run_gui_main(with_local_config(sys.argv))
