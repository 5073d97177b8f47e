"""Runs a ChallengeWorkflow on an event loop thread.

The workflow is asyncio-native. Hosts that are not (the terminal prompt, the
Streamlit script) drive it through a WorkflowRunner: every call is marshalled
onto the loop thread, so transitions stay serialized exactly as they would be
inside a single asyncio program.

A runner either owns a private loop thread (the CLI) or borrows one started
with start_loop_thread() and shared by many runners (the dashboard, one
runner per browser session).
"""

import asyncio
import concurrent.futures
import threading
from typing import Any, Callable

from pdojo.state import WorkflowState
from pdojo.workflow import ChallengeWorkflow


def start_loop_thread(
    name: str = "pdojo-loop",
) -> tuple[asyncio.AbstractEventLoop, threading.Thread]:
    """Start an event loop on a daemon thread. Returns the loop and its thread."""
    loop = asyncio.new_event_loop()

    def _run() -> None:
        asyncio.set_event_loop(loop)
        loop.run_forever()

    thread = threading.Thread(target=_run, name=name, daemon=True)
    thread.start()
    return loop, thread


class WorkflowRunner:
    def __init__(self, workflow: ChallengeWorkflow, loop: asyncio.AbstractEventLoop | None = None):
        self.workflow = workflow
        self._thread: threading.Thread | None = None
        if loop is None:
            loop, self._thread = start_loop_thread()
        self._loop = loop
        self._closed = False

    def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run fn(*args) on the loop thread and return its result (or raise its exception)."""

        async def _invoke():
            return fn(*args)

        return asyncio.run_coroutine_threadsafe(_invoke(), self._loop).result()

    # --- Workflow operations ---

    def request_challenge(self) -> None:
        self._call(self.workflow.request_challenge)

    def edit(self, text: str) -> None:
        self._call(self.workflow.edit, text)

    def submit(self) -> None:
        """Submit the current draft. Raises EmptySolution / InvalidTransition like the workflow."""
        self._call(self.workflow.submit)

    def snapshot(self) -> WorkflowState:
        return self._call(self.workflow.snapshot)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until outstanding fetches/evaluations finish.

        Returns False if the timeout expired first; the calls keep running.
        """
        future = asyncio.run_coroutine_threadsafe(self.workflow.settle(), self._loop)
        try:
            future.result(timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            return False
        return True

    # --- Lifecycle ---

    def close(self) -> None:
        """Cancel this workflow's outstanding calls; stop the loop if this runner owns it."""
        if self._closed:
            return
        self._closed = True

        async def _cancel_pending():
            tasks = [t for t in self.workflow.tasks if not t.done()]
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        asyncio.run_coroutine_threadsafe(_cancel_pending(), self._loop).result()
        if self._thread is not None:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join()
            self._loop.close()

    def __enter__(self) -> "WorkflowRunner":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
