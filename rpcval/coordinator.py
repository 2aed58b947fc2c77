"""Batch coordinator: fixed-size probe batches with a barrier between them."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator, Sequence

from rpcval.models import ValidationOutcome

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 25

ProbeFn = Callable[[str], Awaitable[bool | ValidationOutcome]]
ProgressFn = Callable[[int, int], None]


def batched(items: Sequence[str], size: int) -> Iterator[Sequence[str]]:
    """Yield contiguous slices of *items* holding at most *size* entries.

    Raises:
        ValueError: If *size* is less than 1.
    """
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def log_progress(done: int, total: int) -> None:
    """Default progress callback."""
    logger.info("Progress: %d/%d", done, total)


class BatchCoordinator:
    """Run probes over a list of addresses in sequential batches.

    Probes inside a batch run concurrently; the next batch starts only
    after every probe of the current one has settled, so at most
    *batch_size* probes are ever in flight.

    Args:
        probe: Async callable taking an address and returning either a
            ``bool`` or a ``ValidationOutcome``.
        batch_size: Maximum number of concurrent probes.
        on_progress: Called with ``(settled, total)`` after every probe
            settles, in completion order.
    """

    def __init__(
        self,
        probe: ProbeFn,
        batch_size: int = DEFAULT_BATCH_SIZE,
        on_progress: ProgressFn | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"Batch size must be at least 1, got {batch_size}")
        self._probe = probe
        self._batch_size = batch_size
        self._on_progress = on_progress or log_progress

    async def validate(self, addresses: Sequence[str]) -> list[str]:
        """Return the addresses whose probe succeeded, in input order."""
        outcomes = await self.run(addresses)
        return [o.address for o in outcomes if o.ok]

    async def run(self, addresses: Sequence[str]) -> list[ValidationOutcome]:
        """Probe every address and return one outcome per input, in order."""
        if not addresses:
            return []

        total = len(addresses)
        settled = 0
        outcomes: list[ValidationOutcome] = []

        for batch in batched(addresses, self._batch_size):
            tasks = [asyncio.ensure_future(self._probe(addr)) for addr in batch]

            pending = set(tasks)
            while pending:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                for _ in done:
                    settled += 1
                    self._on_progress(settled, total)

            outcomes.extend(
                _to_outcome(addr, task) for addr, task in zip(batch, tasks)
            )

        passed = sum(1 for o in outcomes if o.ok)
        logger.info(
            "Validated %d working RPC endpoints out of %d.", passed, total
        )
        return outcomes


def _to_outcome(address: str, task: asyncio.Task) -> ValidationOutcome:
    """Convert a settled probe task into a ``ValidationOutcome``."""
    if task.cancelled():
        return ValidationOutcome(address=address, ok=False, error="cancelled")

    exc = task.exception()
    if exc is not None:
        logger.warning("Probe of %s raised unexpectedly: %r", address, exc)
        return ValidationOutcome(address=address, ok=False, error=repr(exc))

    result = task.result()
    if isinstance(result, ValidationOutcome):
        return result
    return ValidationOutcome(
        address=address,
        ok=result is True,
        error=None if result is True else "probe reported failure",
    )
