# src/hashlink_shell/core/loop_runner.py
from __future__ import annotations

import asyncio
import threading
from typing import Optional, Any

_MAIN_LOOP: Optional[asyncio.AbstractEventLoop] = None
_THREAD: Optional[threading.Thread] = None
_LOCK = threading.Lock()


def ensure_background_loop() -> None:
    """
    Ensures a persistent asyncio event loop is running on a background thread.
    Flask request threads submit their page fetches to this loop.
    """
    global _MAIN_LOOP, _THREAD
    with _LOCK:
        if _MAIN_LOOP is not None:
            return

        loop = asyncio.new_event_loop()

        def _run_loop(loop_: asyncio.AbstractEventLoop) -> None:
            """Sets the loop and runs it until stop() is called."""
            asyncio.set_event_loop(loop_)
            loop_.run_forever()

        # Start the loop in a dedicated, daemonized thread
        t = threading.Thread(target=_run_loop, args=(loop,), daemon=True, name="fetch-loop")
        t.start()

        _MAIN_LOOP = loop
        _THREAD = t


def run_on_main_loop(coro: "asyncio.coroutines.coroutine[Any, Any, Any]", timeout: float | None = None) -> Any:
    """
    Executes a coroutine on the persistent background loop and waits for the result.
    Falls back to asyncio.run() if no background loop exists (e.g. in a simple test context).

    Args:
        coro: The coroutine to execute.
        timeout (float | None): Optional timeout in seconds to wait for the result.

    Returns:
        Any: The result of the coroutine.
    """
    if _MAIN_LOOP is not None:
        fut = asyncio.run_coroutine_threadsafe(coro, _MAIN_LOOP)
        return fut.result(timeout)

    return asyncio.run(coro)
