"""
POSTURECOACH Worker Thread Pools

OpenCV decoding and pose detection are CPU-bound and would stall the event
loop, so they run on fixed-size thread pools: one for whole-video jobs and
one for per-frame work (video fan-out and WebSocket frames).
"""

import asyncio
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Iterable, Iterator

from core.config import settings

logger = logging.getLogger(__name__)


class WorkerPool:
    """
    Named thread pool with job counters.

    Usage:
        result = await get_frame_pool().run(analyze_image, image, "squat", detector)
        evaluations = list(get_frame_pool().map(evaluate_one, frames))
    """

    def __init__(self, max_workers: int = None, name: str = "worker_pool"):
        self.max_workers = max_workers or settings.THREAD_POOL_SIZE
        self.name = name

        self._executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix=f"{name}_"
        )

        self._lock = threading.Lock()
        self._active = 0
        self._completed = 0
        self._failed = 0
        self._busy_seconds = 0.0

        logger.info(f"🧵 WorkerPool '{name}' initialized (workers: {self.max_workers})")

    def _tracked(self, func: Callable, *args, **kwargs) -> Any:
        with self._lock:
            self._active += 1
        started = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            with self._lock:
                self._failed += 1
            logger.error(f"Job on '{self.name}' failed: {e}")
            raise
        else:
            with self._lock:
                self._completed += 1
            return result
        finally:
            with self._lock:
                self._active -= 1
                self._busy_seconds += time.perf_counter() - started

    async def run(self, func: Callable, *args, **kwargs) -> Any:
        """Run func on the pool and await its result. Exceptions propagate to the caller."""
        future = self._executor.submit(self._tracked, func, *args, **kwargs)
        return await asyncio.wrap_future(future)

    def map(self, func: Callable, items: Iterable) -> Iterator:
        """Apply func to every item on the pool; results come back in input order."""
        return self._executor.map(partial(self._tracked, func), items)

    def shutdown(self, wait: bool = True):
        logger.info(f"Shutting down WorkerPool '{self.name}' ({self._completed} jobs done, {self._failed} failed)")
        self._executor.shutdown(wait=wait)

    def get_stats(self) -> dict:
        with self._lock:
            return {
                "name": self.name,
                "max_workers": self.max_workers,
                "active_jobs": self._active,
                "completed_jobs": self._completed,
                "failed_jobs": self._failed,
                "busy_seconds": round(self._busy_seconds, 3),
            }


# ============================================
# Global Worker Pools
# ============================================

# One job per uploaded video
video_worker_pool = WorkerPool(name="video_analysis")

# Per-frame detection + evaluation
frame_worker_pool = WorkerPool(name="frame_analysis")


def get_video_pool() -> WorkerPool:
    return video_worker_pool


def get_frame_pool() -> WorkerPool:
    return frame_worker_pool
