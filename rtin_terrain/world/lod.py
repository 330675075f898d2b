from __future__ import annotations

import logging
import queue
import threading
from typing import Dict, Iterable, Optional, Tuple

from rtin_terrain.config import DEFAULT_LOD_WORKERS
from rtin_terrain.world.error_field import ErrorField
from rtin_terrain.world.height import HeightField
from rtin_terrain.world.mesh import TerrainMeshData
from rtin_terrain.world.rtin import RtinExtractor

logger = logging.getLogger(__name__)

_Result = Tuple[int, Optional[TerrainMeshData], Optional[BaseException]]


class TierWorker(threading.Thread):
    def __init__(self, task_q: "queue.Queue[tuple[int, float]]", out_q: "queue.Queue[_Result]", *, extractor: RtinExtractor) -> None:
        super().__init__(daemon=True)
        self.task_q = task_q
        self.out_q = out_q
        self.extractor = extractor
        self._stop_event = threading.Event()

    def stop(self) -> None:
        self._stop_event.set()

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                key, max_error = self.task_q.get(timeout=0.1)
            except queue.Empty:
                continue
            try:
                mesh = self.extractor.extract(max_error)
            except Exception as e:
                # handed back to the thread that called build()
                self.out_q.put((key, None, e))
            else:
                self.out_q.put((key, mesh, None))
            finally:
                self.task_q.task_done()


class LodBuilder:
    """Extracts several error tiers from one heightfield on worker threads.

    The error field is built once up front and shared read-only by all
    workers; every tier gets its own extraction state.
    """

    def __init__(
        self,
        heightfield: HeightField,
        *,
        workers: int = DEFAULT_LOD_WORKERS,
        error_field: ErrorField | None = None,
    ) -> None:
        self.extractor = RtinExtractor(heightfield, error_field)

        self.task_q: "queue.Queue[tuple[int, float]]" = queue.Queue()
        self.out_q: "queue.Queue[_Result]" = queue.Queue()

        self.workers = [
            TierWorker(self.task_q, self.out_q, extractor=self.extractor)
            for _ in range(max(1, int(workers)))
        ]
        for w in self.workers:
            w.start()

    def __enter__(self) -> "LodBuilder":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        for w in self.workers:
            w.stop()
        for w in self.workers:
            w.join(timeout=1.0)

    def build(self, max_errors: Iterable[float]) -> Dict[float, TerrainMeshData]:
        """Return {max_error: mesh} in request order; re-raises the first worker failure."""
        tiers = [float(e) for e in max_errors]
        for key, max_error in enumerate(tiers):
            self.task_q.put((key, max_error))

        meshes: Dict[int, TerrainMeshData] = {}
        failure: BaseException | None = None
        for _ in tiers:
            key, mesh, err = self.out_q.get()
            if err is not None:
                failure = failure or err
                continue
            meshes[key] = mesh
        if failure is not None:
            raise failure

        for key, max_error in enumerate(tiers):
            logger.debug("lod tier max_error=%g triangles=%d", max_error, meshes[key].num_triangles)
        return {tiers[key]: meshes[key] for key in range(len(tiers))}


def build_lod_tiers(
    heightfield: HeightField,
    max_errors: Iterable[float],
    *,
    workers: int = DEFAULT_LOD_WORKERS,
) -> Dict[float, TerrainMeshData]:
    with LodBuilder(heightfield, workers=workers) as builder:
        return builder.build(max_errors)
