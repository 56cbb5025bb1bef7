"""
File downloader for CDN Sync.

Downloads planned tasks strictly one after another using asyncio + aiohttp.
The first failure aborts the rest of the batch; there are no retries.
Cancellation is checked between files and never interrupts a transfer.
"""

import asyncio
import logging
import os
import signal
import ssl
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

import aiohttp
import certifi

from ..cache import CacheStore
from ..constants import DEFAULT_CHUNK_SIZE, PARTIAL_SUFFIX, PROGRESS_TICK_INTERVAL
from ..core.formatting import format_duration, format_size
from ..core.progress import DownloadProgress
from ..exceptions import LocalWriteError, TransportError
from .download_planner import DownloadTask

log = logging.getLogger(__name__)


@dataclass
class DownloadEvent:
    """Emitted after each task completes."""
    task: DownloadTask
    index: int
    total: int
    bytes_written: int
    from_cache: bool = False


@dataclass
class DownloadSummary:
    """Outcome of a batch."""
    downloaded: int = 0
    from_cache: int = 0
    bytes_downloaded: int = 0
    cancelled: bool = False

    @property
    def completed(self) -> int:
        return self.downloaded + self.from_cache


class FileDownloader:
    """
    Sequential async file downloader with progress tracking.

    Reads and writes the cache's package tier: a cached file is copied into
    place without a request, and every live download is stored for reuse.
    """

    def __init__(
        self,
        cache: Optional[CacheStore] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        timeout: Optional[float] = None,
        tick_interval: float = PROGRESS_TICK_INTERVAL,
    ):
        self.cache = cache
        self.chunk_size = chunk_size
        self.timeout = timeout
        self.tick_interval = tick_interval

    def _session_kwargs(self) -> dict:
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        kwargs = {"connector": aiohttp.TCPConnector(limit=1, ssl=ssl_context)}
        if self.timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=self.timeout)
        return kwargs

    def _from_package_cache(self, task: DownloadTask) -> Optional[bytes]:
        if self.cache is None:
            return None
        hit, data = self.cache.get_package_file(task.provider, task.library, task.version, task.remote_path)
        return data if hit else None

    def _store_in_package_cache(self, task: DownloadTask):
        if self.cache is None:
            return
        try:
            self.cache.set_package_file(
                task.provider, task.library, task.version, task.remote_path,
                task.local_path.read_bytes(),
            )
        except OSError as e:
            log.warning(f"Could not cache {task.library}/{task.remote_path}: {e}")

    @staticmethod
    def _partial_path(path: Path) -> Path:
        """Sibling file a transfer streams into before it replaces the destination."""
        return path.with_name(path.name + PARTIAL_SUFFIX)

    def _write_cached(self, task: DownloadTask, data: bytes):
        """Materialize package-cache bytes at the task's local path."""
        partial = self._partial_path(task.local_path)
        try:
            task.local_path.parent.mkdir(parents=True, exist_ok=True)
            partial.write_bytes(data)
            os.replace(partial, task.local_path)
        except OSError as e:
            self._remove_partial(partial)
            raise LocalWriteError(task.local_path, e.strerror or str(e)) from e

    async def _write_response(
        self,
        response: aiohttp.ClientResponse,
        partial: Path,
        progress: Optional[DownloadProgress],
    ) -> int:
        """Stream response body to the partial file."""
        downloaded_bytes = 0
        with open(partial, "wb") as f:
            async for chunk in response.content.iter_chunked(self.chunk_size):
                if chunk:
                    f.write(chunk)
                    downloaded_bytes += len(chunk)
                    if progress:
                        progress.add_bytes(len(chunk))
        return downloaded_bytes

    async def _download_file_async(
        self,
        session: aiohttp.ClientSession,
        task: DownloadTask,
        progress: Optional[DownloadProgress] = None,
    ) -> int:
        """
        Download a single file.

        The body is streamed into a ".part" sibling and moved over the
        destination only once complete, so a failed transfer never touches
        an existing copy.
        """
        partial = self._partial_path(task.local_path)
        try:
            task.local_path.parent.mkdir(parents=True, exist_ok=True)
            async with session.get(task.url, allow_redirects=True) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(task.url, response.status, response.reason or "")
                written = await self._write_response(response, partial, progress)
            os.replace(partial, task.local_path)
            return written
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._remove_partial(partial)
            raise TransportError(task.url, detail=str(e) or e.__class__.__name__) from e
        except OSError as e:
            self._remove_partial(partial)
            raise LocalWriteError(task.local_path, e.strerror or str(e)) from e
        except BaseException:
            self._remove_partial(partial)
            raise

    @staticmethod
    def _remove_partial(path: Path):
        with suppress(OSError):
            path.unlink()

    async def _tick(self, progress: DownloadProgress):
        """Periodically render progress while a transfer runs."""
        while True:
            await asyncio.sleep(self.tick_interval)
            progress.tick()

    async def download_many_async(
        self,
        tasks: List[DownloadTask],
        progress: Optional[DownloadProgress] = None,
        on_event: Optional[Callable[[DownloadEvent], None]] = None,
    ) -> DownloadSummary:
        """
        Download tasks in order.

        Raises:
            TransportError: First failed task; remaining tasks are not attempted
            LocalWriteError: A destination could not be written
        """
        summary = DownloadSummary()
        if not tasks:
            return summary

        ticker = asyncio.create_task(self._tick(progress)) if progress else None
        try:
            async with aiohttp.ClientSession(**self._session_kwargs()) as session:
                for index, task in enumerate(tasks):
                    if progress and progress.cancelled:
                        summary.cancelled = True
                        break

                    if progress:
                        progress.start_file(f"{task.library}/{task.remote_path}", task.size)

                    cached = self._from_package_cache(task)
                    if cached is not None:
                        self._write_cached(task, cached)
                        written = len(cached)
                        summary.from_cache += 1
                        if progress:
                            progress.add_bytes(written)
                    else:
                        written = await self._download_file_async(session, task, progress)
                        self._store_in_package_cache(task)
                        summary.downloaded += 1
                        summary.bytes_downloaded += written

                    if progress:
                        progress.finish_file()
                    if on_event:
                        on_event(DownloadEvent(
                            task=task,
                            index=index,
                            total=len(tasks),
                            bytes_written=written,
                            from_cache=cached is not None,
                        ))
        finally:
            if ticker:
                ticker.cancel()
                with suppress(asyncio.CancelledError):
                    await ticker

        return summary

    def download_many(
        self,
        tasks: List[DownloadTask],
        on_event: Optional[Callable[[DownloadEvent], None]] = None,
        show_progress: bool = True,
    ) -> DownloadSummary:
        """Download tasks sequentially. Ctrl+C stops before the next file."""
        if not tasks:
            return DownloadSummary()

        total_bytes = sum(t.size for t in tasks)
        progress = DownloadProgress(total_files=len(tasks), total_bytes=total_bytes, quiet=not show_progress)
        if show_progress:
            size_info = f" ({format_size(total_bytes)})" if total_bytes else ""
            print(f"  Downloading {len(tasks)} files{size_info}...")
            print("  (press Ctrl+C to stop after the current file)")
            print()

        def handle_interrupt(signum, frame):
            if not progress.cancelled:
                progress.cancel()
                print("\n  Cancelling after current file...")

        original_handler = None
        try:
            original_handler = signal.signal(signal.SIGINT, handle_interrupt)
        except ValueError:
            # Not on the main thread
            pass

        try:
            summary = asyncio.run(self.download_many_async(tasks, progress, on_event))
        finally:
            if original_handler is not None:
                signal.signal(signal.SIGINT, original_handler)
            progress.close()

        if show_progress:
            if summary.cancelled:
                print(f"  Cancelled. Downloaded {summary.completed} of {len(tasks)} files.")
            else:
                print(f"  Finished in {format_duration(progress.elapsed)}")
        return summary
