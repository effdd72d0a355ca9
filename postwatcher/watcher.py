"""Directory watching for PostWatcher."""

import asyncio
import errno
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Optional

from watchfiles import Change, awatch

logger = logging.getLogger(__name__)

WATCHED_EXTENSIONS = (".md", ".txt")


@dataclass(frozen=True)
class StabilityPolicy:
    """When a file counts as completely written.

    A file is ready once no change has been reported for it during
    ``min_stable_age`` seconds. Pending files are re-checked every
    ``poll_interval`` seconds.
    """

    min_stable_age: float = 1.0
    poll_interval: float = 0.1


class DirectoryWatcher:
    """Watch a directory with watchfiles and report files once they are stable.

    Files already present at start-up are reported too. A path is reported
    once while it exists; if it is removed and created again it is reported
    again.
    """

    def __init__(
        self,
        directory: Path,
        policy: Optional[StabilityPolicy] = None,
        extensions: tuple[str, ...] = WATCHED_EXTENSIONS,
    ):
        self.directory = directory.resolve()
        self.policy = policy or StabilityPolicy()
        self.extensions = tuple(ext.lower() for ext in extensions)
        self._pending: dict[Path, float] = {}
        self._reported: set[Path] = set()
        self._running = False
        self._stop_event: Optional[asyncio.Event] = None

    def accepts(self, change: Change, path: str) -> bool:
        """watchfiles filter: only watched extensions in the directory itself."""
        candidate = Path(path)
        return (
            candidate.parent == self.directory
            and candidate.suffix.lower() in self.extensions
        )

    def track(self, change: Change, path: Path, now: float) -> None:
        """Record one change reported by watchfiles."""
        if change == Change.deleted:
            self._pending.pop(path, None)
            self._reported.discard(path)
        elif path not in self._reported:
            self._pending[path] = now

    def scan_existing(self, now: float) -> None:
        """Queue files already in the directory and forget vanished ones.

        Raises:
            OSError: If the directory cannot be listed
        """
        present = set()
        for path in sorted(self.directory.iterdir()):
            if not (path.is_file() and self.accepts(Change.added, str(path))):
                continue
            present.add(path)
            if path not in self._reported:
                self._pending.setdefault(path, now)
        self._reported &= present

    def ready(self, now: float) -> list[Path]:
        """Pop the pending files that have been quiet long enough.

        Returns:
            Ready paths sorted by name
        """
        ready = []
        for path, changed_at in sorted(self._pending.items()):
            if now - changed_at < self.policy.min_stable_age:
                continue
            del self._pending[path]
            if path.is_file():
                self._reported.add(path)
                ready.append(path)
        return ready

    async def run(self, handler: Callable[[Path], Awaitable[object]]) -> None:
        """Watch until stop() is called, handling ready files one at a time.

        Handler errors and watch errors (for example a missing directory)
        are logged and never stop the loop.
        """
        self._running = True
        failing = False
        while self._running:
            try:
                await self._watch(handler)
                failing = False
            except Exception as e:
                if not failing:
                    logger.error("Watcher error on %s: %s", self.directory, e)
                else:
                    logger.debug("Watcher still failing on %s: %s", self.directory, e)
                failing = True
                await asyncio.sleep(self.policy.poll_interval)

    async def _watch(self, handler: Callable[[Path], Awaitable[object]]) -> None:
        self._stop_event = asyncio.Event()
        if not self._running:
            return

        self.scan_existing(time.monotonic())
        await self._dispatch(handler)
        if not self._running:
            return

        tick_ms = max(int(self.policy.poll_interval * 1000), 10)
        async for changes in awatch(
            self.directory,
            watch_filter=self.accepts,
            stop_event=self._stop_event,
            debounce=tick_ms,
            rust_timeout=tick_ms,
            yield_on_timeout=True,
            recursive=False,
        ):
            now = time.monotonic()
            for change, raw_path in changes:
                self.track(change, Path(raw_path), now)

            if not self.directory.is_dir():
                raise FileNotFoundError(
                    errno.ENOENT, "Watched directory disappeared", str(self.directory)
                )

            await self._dispatch(handler)

    async def _dispatch(self, handler: Callable[[Path], Awaitable[object]]) -> None:
        for path in self.ready(time.monotonic()):
            logger.info("Detected new file: %s", path.name)
            try:
                await handler(path)
            except Exception:
                logger.exception("Failed to process input file %s", path.name)
            logger.info("Waiting for next file...")
            if not self._running:
                return

    def stop(self) -> None:
        self._running = False
        if self._stop_event is not None:
            self._stop_event.set()
