"""Incremental typewriter-style reveal of markup-bearing text."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterator, List

from talegraph.core.types import RevealState

logger = logging.getLogger(__name__)

TickCallback = Callable[[str], None]
DoneCallback = Callable[[], None]
SleepFunction = Callable[[float], Awaitable[object]]

DEFAULT_TICK_INTERVAL = 0.01


def split_reveal_units(text: str) -> List[str]:
    """Split ``text`` into reveal units: single characters or whole ``<...>`` tags.

    An unterminated ``<`` swallows the rest of the text as one unit so a
    partial tag is never displayed.
    """
    units: List[str] = []
    index = 0
    length = len(text)
    while index < length:
        if text[index] == "<":
            close = text.find(">", index + 1)
            end = length if close == -1 else close + 1
            units.append(text[index:end])
            index = end
        else:
            units.append(text[index])
            index += 1
    return units


def reveal_frames(text: str, chars_per_tick: int = 1) -> Iterator[str]:
    """Yield successive displayed prefixes of ``text``; the last is ``text`` itself."""
    step = max(int(chars_per_tick), 1)
    units = split_reveal_units(text)
    shown = ""
    for start in range(0, len(units), step):
        shown += "".join(units[start : start + step])
        yield shown
    if not units:
        yield ""


class RevealHandle:
    """One reveal in progress. Drive it with :meth:`advance` or via the engine's task."""

    def __init__(
        self,
        text: str,
        on_tick: TickCallback,
        on_done: DoneCallback | None = None,
        *,
        chars_per_tick: int = 1,
    ) -> None:
        self.text = text
        self.displayed = ""
        self.state: RevealState = "idle"
        self._on_tick = on_tick
        self._on_done = on_done
        self._frames = reveal_frames(text, chars_per_tick)
        self._task: asyncio.Task[None] | None = None
        self._finished = asyncio.Event() if _has_running_loop() else None

    @property
    def active(self) -> bool:
        return self.state in ("idle", "revealing")

    def advance(self) -> bool:
        """Reveal the next unit(s). Returns True while more remain."""
        if not self.active:
            return False
        self.state = "revealing"
        frame = next(self._frames, None)
        if frame is None:
            self._complete(emit=False)
            return False
        self._show(frame)
        if not self.active:
            return False
        if frame == self.text:
            self._complete(emit=False)
            return False
        return True

    def skip(self) -> None:
        """Jump straight to the full text. No-op once done or cancelled."""
        if not self.active:
            return
        self._stop_task()
        self._complete(emit=self.displayed != self.text)

    def cancel(self) -> None:
        """Stop without firing the completion callback. Idempotent."""
        if not self.active:
            return
        self.state = "cancelled"
        self._stop_task()
        self._set_finished()

    async def wait(self) -> None:
        """Wait until the reveal is done or cancelled."""
        if not self.active:
            return
        if self._task is not None and self._task is not asyncio.current_task():
            try:
                await asyncio.shield(self._task)
            except asyncio.CancelledError:
                if self.active:
                    raise
            return
        if self._finished is None:
            self._finished = asyncio.Event()
        await self._finished.wait()

    def _show(self, frame: str) -> None:
        self.displayed = frame
        self._on_tick(frame)

    def _complete(self, *, emit: bool) -> None:
        if not self.active:
            return
        if emit:
            self._show(self.text)
            if not self.active:
                return
        self.displayed = self.text
        self.state = "done"
        self._set_finished()
        if self._on_done is not None:
            self._on_done()

    def _stop_task(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()

    def _set_finished(self) -> None:
        if self._finished is not None:
            self._finished.set()


class RevealEngine:
    """Runs at most one reveal at a time on the host's asyncio event loop."""

    def __init__(
        self,
        *,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        chars_per_tick: int = 1,
        sleep: SleepFunction = asyncio.sleep,
    ) -> None:
        self._tick_interval = max(float(tick_interval), 0.0)
        self._chars_per_tick = max(int(chars_per_tick), 1)
        self._sleep = sleep
        self._current: RevealHandle | None = None

    @property
    def current(self) -> RevealHandle | None:
        return self._current

    def start(
        self,
        text: str,
        on_tick: TickCallback,
        on_done: DoneCallback | None = None,
        *,
        autorun: bool = True,
    ) -> RevealHandle:
        """Begin revealing ``text``, cancelling any reveal already in flight.

        With ``autorun`` the reveal is scheduled as a task on the running event
        loop; without it the caller drives the handle with ``advance()``.
        """
        if self._current is not None:
            self._current.cancel()
        handle = RevealHandle(text, on_tick, on_done, chars_per_tick=self._chars_per_tick)
        handle.state = "revealing"
        self._current = handle
        if autorun:
            loop = asyncio.get_running_loop()
            handle._task = loop.create_task(self._run(handle))
        return handle

    def skip(self, handle: RevealHandle | None = None) -> None:
        target = handle or self._current
        if target is not None:
            target.skip()

    def cancel(self, handle: RevealHandle | None = None) -> None:
        target = handle or self._current
        if target is not None:
            target.cancel()

    async def _run(self, handle: RevealHandle) -> None:
        while handle.advance():
            await self._sleep(self._tick_interval)
        logger.debug("Reveal finished in state %s.", handle.state)


def _has_running_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


def _current_task() -> asyncio.Task[object] | None:
    if not _has_running_loop():
        return None
    return asyncio.current_task()
