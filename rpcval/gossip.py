"""Gossip snapshot fetcher: runs ``solana gossip`` and parses its JSON output."""

import asyncio
import contextlib
import json
import logging

from rpcval.config import ValidatorConfig
from rpcval.models import CandidateNode

logger = logging.getLogger(__name__)

_READ_CHUNK = 64 * 1024


class GossipError(Exception):
    """Raised internally when the gossip snapshot cannot be obtained."""


def gossip_command(config: ValidatorConfig) -> list[str]:
    """Return the argv used to fetch the gossip snapshot."""
    return [
        config.solana_binary,
        "gossip",
        "--url",
        config.solana_rpc_url,
        "--output",
        "json",
    ]


async def fetch_gossip_nodes(config: ValidatorConfig) -> list[CandidateNode]:
    """Fetch and parse the gossip snapshot.

    Discovery failures are never raised: a missing binary, a non-zero exit
    status, oversized or non-JSON output all log the cause and yield an
    empty list, so "nothing found" and "discovery failed" look the same to
    the rest of the pipeline.

    Args:
        config: Loaded application configuration.

    Returns:
        The parsed nodes, in snapshot order.
    """
    command = gossip_command(config)
    logger.info("Executing command: %s", " ".join(command))

    try:
        stdout, stderr = await _run_bounded(command, config.max_buffer_size)
        nodes = parse_gossip_output(stdout, stderr)
    except (GossipError, OSError) as exc:
        logger.error("Failed to execute Solana gossip command: %s", exc)
        return []

    logger.info("Found %d nodes in the gossip network.", len(nodes))
    return nodes


def parse_gossip_output(stdout: str, stderr: str = "") -> list[CandidateNode]:
    """Parse ``solana gossip --output json`` output into nodes.

    Stdout takes precedence: stderr only fails the fetch when stdout is
    empty.  Array entries that are not JSON objects are skipped.

    Raises:
        GossipError: If stdout is empty, not JSON, or not a JSON array.
    """
    if not stdout.strip():
        if stderr.strip():
            raise GossipError(f"Error executing solana gossip: {stderr.strip()}")
        raise GossipError("solana gossip produced no output")

    if stderr.strip():
        logger.warning("solana gossip wrote to stderr: %s", stderr.strip())

    try:
        raw = json.loads(stdout)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise GossipError(f"Invalid JSON from solana gossip: {exc}") from exc

    if not isinstance(raw, list):
        raise GossipError(
            f"Expected a JSON array from solana gossip, got {type(raw).__name__}"
        )

    nodes: list[CandidateNode] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            logger.debug("Skipping gossip entry %d: not an object", index)
            continue
        nodes.append(CandidateNode.from_dict(entry))
    return nodes


def extract_rpc_hosts(nodes: list[CandidateNode]) -> list[str]:
    """Return the RPC address of every node that advertises one.

    Snapshot order is kept and duplicates are not collapsed.
    """
    return [node.rpc_host for node in nodes if node.rpc_host]


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


async def _run_bounded(command: list[str], max_bytes: int) -> tuple[str, str]:
    """Run *command* and return its decoded ``(stdout, stderr)``.

    Raises:
        OSError: If the executable cannot be started.
        GossipError: On a non-zero exit status or when either stream
            exceeds *max_bytes*.
    """
    proc = await asyncio.create_subprocess_exec(
        *command,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    try:
        stdout, stderr = await asyncio.gather(
            _read_bounded(proc.stdout, max_bytes, "stdout"),
            _read_bounded(proc.stderr, max_bytes, "stderr"),
        )
    except GossipError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        raise

    returncode = await proc.wait()
    err_text = stderr.decode("utf-8", errors="replace")
    if returncode != 0:
        raise GossipError(
            f"Command failed with exit status {returncode}: {err_text.strip()}"
        )

    return stdout.decode("utf-8", errors="replace"), err_text


async def _read_bounded(
    stream: asyncio.StreamReader, max_bytes: int, name: str
) -> bytes:
    """Read *stream* to EOF, failing once more than *max_bytes* arrive."""
    chunks: list[bytes] = []
    size = 0
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise GossipError(f"{name} exceeded the {max_bytes}-byte buffer limit")
        chunks.append(chunk)
    return b"".join(chunks)
