"""
Batched probe engine.

Turns a list of logical reads into sequential chunks, tries each chunk as one
aggregated read and falls back to concurrent independent reads when the
aggregated attempt is unusable. Every call yields exactly one ProbeResult;
no call failure is ever raised to the caller.
"""

import asyncio
import logging
from typing import AsyncIterator, List, Optional, Sequence, Tuple

from ..chain.reader import ChainReader
from ..chain.types import Failure, LogicalCall, ProbeResult, normalize_result
from .base import BatchConfig, chunked, success_ratio
from .errors import BatchDegraded, ErrorHandler, RpcCallFailure


class ProbeEngine:
    """
    Chunked, failure-tolerant executor for LogicalCalls.

    Chunks run one after another to bound concurrent connections against the
    RPC endpoint; calls inside a chunk run concurrently when read one by one.
    """

    def __init__(self, reader: ChainReader, config: Optional[BatchConfig] = None):
        self.reader = reader
        self.config = config or BatchConfig()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.error_handler = ErrorHandler(self.logger)

    async def probe(
        self, calls: Sequence[LogicalCall], chunk_size: Optional[int] = None
    ) -> List[ProbeResult]:
        """
        Execute calls and return one result per call, in input order.

        Args:
            calls: Logical reads to execute
            chunk_size: Calls per aggregated request (defaults to config.batch_size)

        Returns:
            List of Success/Failure results, same length as calls
        """
        results: List[ProbeResult] = []
        async for _, chunk_results in self.iter_chunks(calls, chunk_size):
            results.extend(chunk_results)
        return results

    async def iter_chunks(
        self, calls: Sequence[LogicalCall], chunk_size: Optional[int] = None
    ) -> AsyncIterator[Tuple[int, List[ProbeResult]]]:
        """Yield ``(offset, results)`` for each chunk as soon as it completes."""
        size = chunk_size or self.config.batch_size
        chunks = chunked(list(calls), size)
        if chunks:
            self.logger.debug(f"Probing {len(calls)} calls in {len(chunks)} chunks of {size}")

        offset = 0
        for i, chunk in enumerate(chunks):
            yield offset, await self._probe_chunk(chunk, i)
            offset += len(chunk)

    async def probe_independent(
        self, calls: Sequence[LogicalCall], chunk_size: Optional[int] = None
    ) -> List[ProbeResult]:
        """Execute calls one by one (never aggregated), chunk by chunk."""
        size = chunk_size or self.config.batch_size
        results: List[ProbeResult] = []
        for chunk in chunked(list(calls), size):
            results.extend(await self._read_independent(chunk))
        return results

    async def read_one(self, call: LogicalCall) -> ProbeResult:
        """Execute a single call, retrying transient errors, and capture its outcome."""
        try:
            value = await self._retry_operation(self.reader.read, call)
        except Exception as e:
            failure = RpcCallFailure(f"{type(e).__name__}: {e}", call=call.describe())
            self.logger.debug(f"Call failed: {failure.call}: {failure}")
            return Failure(str(failure))
        return normalize_result(value)

    async def _probe_chunk(self, chunk: Sequence[LogicalCall], index: int) -> List[ProbeResult]:
        """Try one aggregated read for the chunk, falling back to independent reads."""
        if not self.reader.supports_batch:
            return await self._read_independent(chunk)

        try:
            raw = await self.reader.read_batch(chunk, allow_partial_failure=True)
            results = [normalize_result(r) for r in raw]
        except Exception as e:
            self.error_handler.log_error(e, {"chunk": index, "calls": len(chunk)})
            return await self._degrade(chunk, index, f"aggregated read raised: {e}")

        if len(results) != len(chunk):
            return await self._degrade(
                chunk, index, f"aggregated read returned {len(results)} results for {len(chunk)} calls"
            )

        ratio = success_ratio(results)
        if ratio < self.config.min_success_ratio:
            return await self._degrade(
                chunk, index, f"aggregated success ratio {ratio:.2%} below threshold", ratio
            )

        return results

    async def _degrade(
        self,
        chunk: Sequence[LogicalCall],
        index: int,
        reason: str,
        ratio: Optional[float] = None,
    ) -> List[ProbeResult]:
        degraded = BatchDegraded(reason, success_ratio=ratio)
        self.logger.warning(
            f"Chunk {index + 1} degraded ({degraded}); re-reading {len(chunk)} calls individually"
        )
        return await self._read_independent(chunk)

    async def _read_independent(self, chunk: Sequence[LogicalCall]) -> List[ProbeResult]:
        # read_one never raises, so one failure cannot cancel its siblings
        return list(await asyncio.gather(*(self.read_one(call) for call in chunk)))

    async def _retry_operation(self, operation, *args, **kwargs):
        """Retry an operation with exponential backoff and intelligent error handling."""
        for attempt in range(self.config.max_retries):
            try:
                return await operation(*args, **kwargs)
            except Exception as e:
                if not self.error_handler.should_retry(e, attempt, self.config.max_retries):
                    raise

                self.error_handler.log_error(
                    e,
                    {
                        "attempt": attempt + 1,
                        "max_retries": self.config.max_retries,
                    },
                )
                delay = self.error_handler.get_retry_delay(e, attempt) * self.config.retry_delay
                self.logger.info(
                    f"Retrying in {delay}s... (attempt {attempt + 1}/{self.config.max_retries})"
                )
                await asyncio.sleep(delay)
