# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/hoist/logging/log.py

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from hoist.utils.paths import logs_dir

_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
    return handler


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "hoist",
    verbose: bool = False,
) -> tuple[logging.Logger, str, Path]:
    """
    Set up logging for one CLI invocation.

    The run log under ~/.hoist/logs always gets DEBUG. The console only
    shows warnings (everything with --debug); normal progress is printed by
    the console observer instead. Returns (logger, run_id, log_path) so the
    event observers can share the run id.
    """
    run_id = str(uuid.uuid4())
    base_dir = Path(base_dir) if base_dir else logs_dir()
    base_dir.mkdir(parents=True, exist_ok=True)

    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{name}-{stamp}-{run_id}.log"

    logger = logging.getLogger(name)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    logger.addHandler(_handler(logging.FileHandler(log_path), logging.DEBUG))
    logger.addHandler(_handler(logging.StreamHandler(), logging.DEBUG if verbose else logging.WARNING))

    logger.debug("run_id=%s log_file=%s", run_id, log_path)
    return logger, run_id, log_path
