"""Result writer: persists the validated host list as a JSON file."""

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class WriteError(Exception):
    """Raised when the validated host list cannot be persisted."""


def write_hosts(hosts: list[str], path: Path | str) -> None:
    """Write *hosts* to *path* as a pretty-printed JSON array.

    Missing parent directories are created first.  The file is written
    to a temporary sibling and moved over *path*, so the previous
    result is fully replaced and never left half-written.  The file gets
    the mode a plain ``open()`` would give it (0666 minus the process
    umask).

    Args:
        hosts: Validated ``host:port`` strings, in order.
        path: Destination file.

    Raises:
        WriteError: If the directory or file cannot be written.
    """
    target = Path(path).expanduser()
    payload = json.dumps(list(hosts), indent=2)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                # mkstemp creates the file 0600; match a plain open() instead.
                os.fchmod(fh.fileno(), _default_file_mode())
                fh.write(payload)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        logger.error("Failed to write RPC hosts to %s: %s", target, exc)
        raise WriteError(f"Cannot write {target}: {exc}") from exc

    logger.info("Successfully saved %d RPC hosts to %s", len(hosts), target)


def read_hosts(path: Path | str) -> list[str]:
    """Read a host list previously written by ``write_hosts``.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not a JSON array of strings.
    """
    raw = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    if not isinstance(raw, list) or not all(isinstance(h, str) for h in raw):
        raise ValueError(f"{path} does not contain a JSON array of strings")
    return raw


def _default_file_mode() -> int:
    """Return 0o666 with the current process umask applied."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask
