# pipeline/inpaint_pipeline.py
"""
Mask-guided inpainting pipeline.

editing mask → reconcile to source size → normalise source + mask → inpaint
→ InpaintResult(original, processed).

At most one run is in flight per pipeline; a second request while one is
outstanding is rejected with PipelineBusy.
"""
from __future__ import annotations

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor

from dotenv import load_dotenv

from models.errors import MissingMask, PipelineBusy
from models.inpaint_result import InpaintResult
from models.raster import Raster
from models.removal_mode import RemovalMode
from services.format_service import FormatService
from services.inpaint_service import InpaintService
from services.resolution_service import ResolutionService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class InpaintPipeline:
    def __init__(
        self,
        *,
        backend: str | None = None,
        radius: int | None = None,
        resolution_service: ResolutionService | None = None,
        format_service: FormatService | None = None,
        inpaint_service: InpaintService | None = None,
    ):
        self.backend = backend
        self.radius = radius if radius is not None else int(os.getenv("INPAINT_RADIUS", "3"))
        self.resolution_service = resolution_service or ResolutionService()
        self.format_service = format_service or FormatService()
        self._inpaint_service = inpaint_service  # built on first run
        self._run_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None

    # ---------- private helpers ----------
    @property
    def inpaint_service(self) -> InpaintService:
        # EngineUnavailable surfaces here and the next run retries
        if self._inpaint_service is None:
            self._inpaint_service = InpaintService(backend=self.backend, radius=self.radius)
        return self._inpaint_service

    def _acquire(self) -> None:
        if not self._run_lock.acquire(blocking=False):
            raise PipelineBusy()

    def _execute(self, source: Raster, mask: Raster, mode: RemovalMode, radius: int | None) -> InpaintResult:
        try:
            logger.info("Running %s on %dx%d source with %dx%d mask",
                        mode.value, source.width, source.height, mask.width, mask.height)

            # 1. mask → source resolution (always, even when sizes already match)
            reconciled = self.resolution_service.reconcile(mask, source.width, source.height)

            # 2. channel layout the engine accepts
            source_ready = self.format_service.normalize_source(source)
            mask_ready = self.format_service.normalize_mask(reconciled)
            if not mask_ready.has_coverage():
                raise MissingMask("The painted mask is too faint to use. Paint over the area again.")

            # 3. fill
            processed = self.inpaint_service.inpaint(source_ready, mask_ready, radius)
            return InpaintResult(original=source, processed=processed)
        finally:
            self._run_lock.release()

    @staticmethod
    def _check_request(mask: Raster | None, mode) -> RemovalMode:
        mode = RemovalMode.parse(mode)
        # no mode infers its own mask
        if mask is None or not mask.has_coverage():
            raise MissingMask()
        return mode

    # ---------- public API ----------
    @property
    def busy(self) -> bool:
        return self._run_lock.locked()

    def run(
        self,
        source: Raster,
        mask: Raster | None,
        mode: RemovalMode | str = RemovalMode.OBJECT_REMOVAL,
        radius: int | None = None,
    ) -> InpaintResult:
        """
        Run the whole pipeline on the calling thread.

        Raises:
            MissingMask: *mask* is absent or has no coverage.
            PipelineBusy: another run is still in flight.
            EngineUnavailable / UnsupportedFormat / DimensionMismatch: see models.errors.
        """
        mode = self._check_request(mask, mode)
        self._acquire()
        return self._execute(source, mask, mode, radius)

    def submit(
        self,
        source: Raster,
        mask: Raster | None,
        mode: RemovalMode | str = RemovalMode.OBJECT_REMOVAL,
        radius: int | None = None,
    ) -> Future:
        """
        Same as run() but on the pipeline's worker thread.
        Busy/missing-mask rejections are raised here, before anything is queued.
        """
        mode = self._check_request(mask, mode)
        self._acquire()
        try:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="inpaint")
            return self._executor.submit(self._execute, source, mask, mode, radius)
        except RuntimeError:
            self._run_lock.release()
            raise

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
