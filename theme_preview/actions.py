"""GitHub Actions step outputs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def write_output(name: str, value: str, path: Optional[str]) -> bool:
    """Append ``name=value`` to the step output file at *path*.

    Returns False when no output file is configured (e.g. local runs).
    """
    if not path:
        logger.debug("GITHUB_OUTPUT not set; %s=%s not exported", name, value)
        return False
    if "\n" in value:
        raise ValueError(f"Output {name} must be a single line")
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("a", encoding="utf-8") as f:
        f.write(f"{name}={value}\n")
    return True
