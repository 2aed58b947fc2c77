"""Orchestration: gossip fetch, batch validation, conditional persistence."""

import asyncio
import logging
import time
from datetime import UTC, datetime

import httpx

from rpcval.config import ValidatorConfig
from rpcval.coordinator import BatchCoordinator, ProgressFn
from rpcval.gossip import extract_rpc_hosts, fetch_gossip_nodes
from rpcval.models import ValidationReport
from rpcval.probe import RpcProber
from rpcval.writer import write_hosts

logger = logging.getLogger(__name__)


async def run_pipeline(
    config: ValidatorConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    on_progress: ProgressFn | None = None,
) -> ValidationReport:
    """Run one discovery-validate-persist pass.

    Pipeline: gossip fetch → RPC host extraction → batched probing →
    write (only when at least one endpoint passed).  An empty result never
    overwrites a previous host list.

    Args:
        config: Loaded ``ValidatorConfig`` instance.
        transport: Optional ``httpx`` transport handed to the prober.
        on_progress: Optional ``(settled, total)`` progress callback.

    Returns:
        A ``ValidationReport`` describing the run.

    Raises:
        WriteError: If the validated host list cannot be persisted.
    """
    logger.info("Starting Solana RPC Validator...")
    started = datetime.now(UTC)
    t0 = time.monotonic()

    nodes = await fetch_gossip_nodes(config)
    rpc_hosts = extract_rpc_hosts(nodes)
    logger.info("Found %d nodes with RPC endpoints.", len(rpc_hosts))

    async with RpcProber(config, transport=transport) as prober:
        coordinator = BatchCoordinator(
            prober.probe_outcome,
            batch_size=config.max_concurrent_tests,
            on_progress=on_progress,
        )
        outcomes = await coordinator.run(rpc_hosts)

    report = ValidationReport(
        candidate_count=len(nodes),
        rpc_host_count=len(rpc_hosts),
        outcomes=outcomes,
        output_path=config.output_path,
        timestamp=started,
    )

    survivors = report.survivors
    if survivors:
        await asyncio.to_thread(write_hosts, survivors, config.output_path)
        report.written = True
        logger.info("RPC validation completed successfully.")
    else:
        logger.warning("No valid RPC hosts found. No file will be written.")

    report.duration_seconds = time.monotonic() - t0
    return report
