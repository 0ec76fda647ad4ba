import asyncio
import logging
from collections import defaultdict
from typing import Any, Callable, Coroutine, Dict, Optional

logger = logging.getLogger(__name__)


class StreamRegistry:
    """Tracks the single active consumption task of each stream channel.

    Starting a stream on a channel cancels the one already running there, so
    two consumers never write to the same conversation state at once.
    """

    # Maximum time to wait for cancelled streams during cleanup (seconds)
    CLEANUP_TIMEOUT = 10.0

    def __init__(self):
        self._tasks: Dict[str, asyncio.Task] = {}
        # Serializes cancel-and-claim so overlapping run() calls start in call order
        self._claim_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def active_streams(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    async def cancel(self, channel: str) -> bool:
        """Cancel the running stream on `channel` and wait for it to unwind."""
        task = self._tasks.pop(channel, None)
        if task is None or task.done():
            return False

        task.cancel()
        # wait() never raises, so our own cancellation is not swallowed here
        await asyncio.wait([task])
        logger.info(f"[{channel}] Cancelled previous stream")
        return True

    async def run(
        self,
        channel: str,
        coro: Coroutine[Any, Any, Any],
        on_claim: Optional[Callable[[], None]] = None,
    ) -> bool:
        """
        Run `coro` as the channel's stream task, replacing any running one.

        Args:
            channel: Stream channel name
            coro: Stream consumer to run as the channel's task
            on_claim: Called after the previous stream has unwound and before
                `coro` starts, while no other run() can claim the channel

        Returns:
            True if the stream ran to completion, False if a newer stream on
            the same channel superseded it

        Raises:
            Whatever the stream raised (e.g. TransportError)
        """
        try:
            async with self._claim_locks[channel]:
                await self.cancel(channel)
                if on_claim is not None:
                    on_claim()
                task = asyncio.create_task(coro, name=f"{channel}-stream")
                self._tasks[channel] = task
        except BaseException:
            # coro never started
            coro.close()
            raise

        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.info(f"[{channel}] Stream superseded by a newer request")
            return False
        finally:
            if self._tasks.get(channel) is task:
                del self._tasks[channel]
        return True

    async def cleanup(self):
        """Cancel every running stream, waiting up to CLEANUP_TIMEOUT for them to stop."""
        tasks = [task for task in self._tasks.values() if not task.done()]
        self._tasks.clear()
        if not tasks:
            return

        for task in tasks:
            task.cancel()
        done, pending = await asyncio.wait(tasks, timeout=self.CLEANUP_TIMEOUT)

        if pending:
            logger.warning(
                f"Cleanup timeout: {len(pending)} streams still active after "
                f"{self.CLEANUP_TIMEOUT}s. Proceeding with cleanup."
            )
        logger.debug(f"Cancelled {len(done)} streams")
