"""
One-shot gate with a deadline.

Callers suspended on re-authentication wait here until a new token arrives
or the deadline passes, whichever happens first.
"""

import asyncio


class TokenGate:
    """
    A future that resolves exactly once, by `open()` or by deadline expiry.

    Must be created inside a running event loop; the deadline starts counting
    at construction.
    """

    def __init__(self, timeout: float) -> None:
        """
        Args:
            timeout: Seconds until the gate opens on its own
        """
        loop = asyncio.get_running_loop()
        self.timeout = timeout
        self._future: asyncio.Future[bool] = loop.create_future()
        self._timer = loop.call_later(timeout, self._expire)

    @property
    def is_open(self) -> bool:
        return self._future.done()

    def open(self) -> None:
        """Open the gate because a token was supplied. No-op once resolved."""
        if self._future.done():
            return
        self._timer.cancel()
        self._future.set_result(True)

    def _expire(self) -> None:
        if not self._future.done():
            self._future.set_result(False)

    async def wait(self) -> bool:
        """
        Wait for the gate to open.

        Returns:
            True when opened by a supplied token, False when the deadline expired
        """
        return await asyncio.shield(self._future)
