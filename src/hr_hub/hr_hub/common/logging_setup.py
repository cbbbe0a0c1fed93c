from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a single console handler to the root logger (idempotent)."""
    root = logging.getLogger()
    root.setLevel(str(level).upper())
    if any(getattr(h, "_hr_hub", False) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._hr_hub = True  # type: ignore[attr-defined]
    root.addHandler(handler)
