"""IO utilities for atomic, durable file replacement."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` atomically within its directory.

    The payload is fsynced before the temporary file replaces the target, so
    a successful return means the bytes are durable.
    """

    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.tmp", suffix=".part", dir=str(directory))
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
    except OSError as exc:
        logger.error("fs.write.failed", extra={"path": str(path), "last_error": str(exc)})
        raise
    finally:
        temp_path.unlink(missing_ok=True)


def write_atomic_json(path: Path, payload: Any) -> None:
    data = json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)
    write_atomic(path, data.encode("utf-8"))


__all__ = ["write_atomic", "write_atomic_json"]
