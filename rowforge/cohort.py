"""
Row distribution across a fixed cohort of worker processes.

Each rank renders a contiguous range of image rows into a private buffer with
no communication during rendering. Rank 0 is the coordinator: it renders its
own range in the calling process and then gathers every rank's buffer, in
rank order, into the global image. The gather is the only blocking point; it
completes once every rank has contributed.
"""

from __future__ import annotations
import logging
import os
import platform
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Iterable, List, Optional
import numpy as np

from .renderer import Renderer, RenderSettings
from .shapes import Scene

logger = logging.getLogger(__name__)

COORDINATOR = 0


class CohortError(Exception):
    """A rank failed; the render is aborted."""
    pass


class BootstrapError(CohortError):
    """A rank failed the startup handshake."""
    pass


class GatherError(CohortError):
    """Rank contributions do not assemble into a full image."""
    pass


@dataclass(frozen=True)
class WorkerInfo:
    """Identity a rank reports during the handshake."""
    rank: int
    host: str
    pid: int


@dataclass
class RankTask:
    """Everything one rank needs to render its rows."""
    rank: int
    rows: range
    scene: Scene
    settings: RenderSettings


@dataclass
class RankResult:
    """A rank's contribution to the gather.

    Attributes:
        rank: Rank that produced the buffer
        rows: Image rows covered by the buffer
        pixels: Buffer of shape (len(rows), width, 3)
        info: Identity of the process that rendered it
        elapsed: Wall-clock render time in seconds
    """
    rank: int
    rows: range
    pixels: np.ndarray
    info: Optional[WorkerInfo] = None
    elapsed: float = 0.0


def partition_rows(height: int, workers: int) -> List[range]:
    """Split image rows into one contiguous range per rank.

    Every rank gets height // workers rows and the first height % workers
    ranks take one extra, so the ranges cover [0, height) exactly once.

    Args:
        height: Image height in rows
        workers: Cohort size

    Returns:
        Row ranges indexed by rank
    """
    if height < 1:
        raise ValueError(f"Height must be positive, got {height}")
    if workers < 1:
        raise ValueError(f"Worker count must be positive, got {workers}")

    chunk, extra = divmod(height, workers)
    ranges = []
    start = 0
    for rank in range(workers):
        stop = start + chunk + (1 if rank < extra else 0)
        ranges.append(range(start, stop))
        start = stop
    return ranges


def get_platform_info() -> dict:
    """Get information about the current platform.

    Returns:
        Dictionary with platform details
    """
    return {
        'system': platform.system(),
        'machine': platform.machine(),
        'node': platform.node(),
        'python_version': platform.python_version(),
        'cpu_count': os.cpu_count(),
    }


def handshake(rank: int) -> WorkerInfo:
    """Report which host and process a rank runs in."""
    return WorkerInfo(rank=rank, host=get_platform_info()['node'], pid=os.getpid())


def render_rank(task: RankTask) -> RankResult:
    """Render one rank's rows. Runs inside a worker process."""
    start = time.perf_counter()
    renderer = Renderer(task.scene, task.settings)

    def report(progress: float) -> None:
        logger.debug(f"[Rank {task.rank}] {progress:.0%} of {len(task.rows)} rows rendered")

    renderer.set_progress_callback(report)
    pixels = renderer.render_rows(task.rows)
    return RankResult(
        rank=task.rank,
        rows=task.rows,
        pixels=pixels,
        info=handshake(task.rank),
        elapsed=time.perf_counter() - start
    )


def gather(results: Iterable[RankResult], width: int, height: int) -> np.ndarray:
    """Assemble every rank's buffer into the global image.

    Args:
        results: One contribution per rank, in any order
        width: Image width
        height: Image height

    Returns:
        Global buffer of shape (height, width, 3)

    Raises:
        GatherError: If a rank is missing or duplicated, or the row ranges
            and buffer shapes do not tile the image in rank order
    """
    by_rank = {}
    for result in results:
        if result.rank in by_rank:
            raise GatherError(f"Rank {result.rank} contributed more than once")
        by_rank[result.rank] = result

    if sorted(by_rank) != list(range(len(by_rank))):
        raise GatherError(f"Missing contributions, got ranks {sorted(by_rank)}")

    image = np.zeros((height, width, 3), dtype=np.float64)
    next_row = 0
    for rank in range(len(by_rank)):
        result = by_rank[rank]
        rows = result.rows
        if len(rows) and (rows.start != next_row or rows.step != 1):
            raise GatherError(f"Rank {rank} rows {rows} do not continue from row {next_row}")
        if result.pixels.shape != (len(rows), width, 3):
            raise GatherError(
                f"Rank {rank} buffer has shape {result.pixels.shape}, "
                f"expected {(len(rows), width, 3)}"
            )
        image[next_row:next_row + len(rows)] = result.pixels
        next_row += len(rows)

    if next_row != height:
        raise GatherError(f"Contributions cover {next_row} of {height} rows")

    return image


class Cohort:
    """A fixed group of ranks rendering one image together."""

    def __init__(self, scene: Scene, settings: RenderSettings):
        """Create a cohort.

        Args:
            scene: Scene shared read-only by every rank
            settings: Render configuration; settings.workers is the cohort size
        """
        self.scene = scene
        self.settings = settings
        self.size = settings.workers
        self.partition = partition_rows(settings.height, self.size)
        self.workers: List[WorkerInfo] = []

    def _tasks(self) -> List[RankTask]:
        return [
            RankTask(rank, rows, self.scene, self.settings)
            for rank, rows in enumerate(self.partition)
        ]

    def bootstrap(self, executor: Optional[ProcessPoolExecutor] = None) -> List[WorkerInfo]:
        """Run the handshake on every rank and wait for all of them.

        Handshakes for ranks 1..P-1 run on whichever pool process is free, so
        they prove every pool slot is alive rather than pinning a rank to a
        process. The process that renders a rank reports itself in
        RankResult.info.

        Raises:
            BootstrapError: If any rank fails to report
        """
        try:
            infos = [handshake(COORDINATOR)]
            if executor is not None:
                futures = [executor.submit(handshake, rank) for rank in range(1, self.size)]
                infos.extend(future.result() for future in futures)
        except Exception as exc:
            raise BootstrapError(f"Cohort bootstrap failed: {exc}") from exc

        for info in infos:
            logger.info(f"[Rank {info.rank}] handshake from host {info.host} (pid {info.pid})")
        self.workers = infos
        return infos

    def render(self) -> np.ndarray:
        """Render the image across the cohort and gather it on rank 0.

        Returns:
            Global image buffer of shape (height, width, 3)

        Raises:
            CohortError: If any rank fails before reaching the gather
        """
        tasks = self._tasks()
        for task in tasks:
            rows = task.rows
            logger.info(f"[Rank {task.rank}] assigned rows {rows.start}-{rows.stop - 1} ({len(rows)} rows)")

        if self.size == 1:
            self.bootstrap()
            results = [self._render_local(tasks[COORDINATOR])]
        else:
            with ProcessPoolExecutor(max_workers=self.size - 1) as executor:
                self.bootstrap(executor)
                futures = [executor.submit(render_rank, task) for task in tasks[1:]]
                results = [self._render_local(tasks[COORDINATOR])]

                logger.info("[Rank 0] Commencing gather")
                for rank, future in enumerate(futures, start=1):
                    try:
                        results.append(future.result())
                    except Exception as exc:
                        executor.shutdown(wait=False, cancel_futures=True)
                        raise CohortError(f"Rank {rank} failed before the gather: {exc}") from exc

        for result in results:
            logger.info(
                f"[Rank {result.rank}] rendered {len(result.rows)} rows in {result.elapsed:.2f}s "
                f"on host {result.info.host} (pid {result.info.pid})"
            )

        return gather(results, self.settings.width, self.settings.height)

    def _render_local(self, task: RankTask) -> RankResult:
        try:
            return render_rank(task)
        except Exception as exc:
            raise CohortError(f"Rank {task.rank} failed before the gather: {exc}") from exc
