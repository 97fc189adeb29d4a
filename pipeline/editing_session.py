# pipeline/editing_session.py
"""
Per-user app state: UPLOAD → EDITOR → PROCESSING → COMPARE.

Errors from the pipeline are recovered here: the message is kept for display,
the session goes back to EDITOR and the painted mask is left untouched.
"""
from __future__ import annotations

import logging
import os
import uuid
from enum import Enum

from dotenv import load_dotenv

from models.editing_surface import EditingSurface, Point
from models.errors import InpaintError
from models.inpaint_result import InpaintResult
from models.raster import Raster
from models.removal_mode import RemovalMode
from models.stroke import Stroke
from services.comparison_service import ComparisonService
from services.coordinate_service import CoordinateService
from services.mask_builder import MaskBuilder, StrokeState
from pipeline.inpaint_pipeline import InpaintPipeline

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class AppState(str, Enum):
    UPLOAD = "UPLOAD"
    EDITOR = "EDITOR"
    PROCESSING = "PROCESSING"
    COMPARE = "COMPARE"


class EditingSession:
    """Manages state for a single user's editing session."""

    def __init__(
        self,
        session_id: str | None = None,
        *,
        pipeline: InpaintPipeline | None = None,
        comparison_service: ComparisonService | None = None,
    ):
        self.session_id = session_id or str(uuid.uuid4())
        self.pipeline = pipeline or InpaintPipeline()
        self.comparison_service = comparison_service or ComparisonService()
        self.container_size = (
            int(os.getenv("DEFAULT_CONTAINER_WIDTH", "960")),
            int(os.getenv("DEFAULT_CONTAINER_HEIGHT", "640")),
        )
        self.brush_radius = int(os.getenv("BRUSH_RADIUS", "20"))
        self._reset_state()

    def _reset_state(self) -> None:
        self.state = AppState.UPLOAD
        self.source: Raster | None = None
        self.surface: EditingSurface | None = None
        self.mask_builder: MaskBuilder | None = None
        self.result: InpaintResult | None = None
        self.reveal = 0.5
        self.error: str | None = None
        self.failure: Exception | None = None

    # ─── upload ───────────────────────────────────────────────────────
    def load_source(self, source: Raster, container_width: int | None = None,
                    container_height: int | None = None) -> EditingSurface:
        if container_width and container_height:
            self.container_size = (int(container_width), int(container_height))
        self.source = source
        self.surface = EditingSurface.fit(source.width, source.height, *self.container_size)
        self.mask_builder = MaskBuilder(self.surface.display_width, self.surface.display_height,
                                        brush_radius=self.brush_radius)
        self.result = None
        self.error = None
        self.state = AppState.EDITOR
        logger.info("Session %s: source %dx%d on %dx%d editing surface (scale %.3f)",
                    self.session_id, source.width, source.height,
                    self.surface.display_width, self.surface.display_height,
                    self.surface.scale_to_source)
        return self.surface

    # ─── authoring ────────────────────────────────────────────────────
    def _require_editor(self) -> MaskBuilder:
        if self.state is not AppState.EDITOR or self.mask_builder is None:
            raise InpaintError(f"Mask editing is not available in state {self.state.value}")
        return self.mask_builder

    def pointer_down(self, x: float, y: float) -> None:
        self._require_editor().begin_stroke(CoordinateService.to_editing(Point(x, y), self.surface))

    def pointer_move(self, x: float, y: float) -> None:
        builder = self._require_editor()
        if builder.state is not StrokeState.STROKING:
            return  # hover without a pressed pointer
        builder.continue_stroke(CoordinateService.to_editing(Point(x, y), self.surface))

    def pointer_up(self) -> None:
        builder = self._require_editor()
        if builder.state is StrokeState.STROKING:
            builder.end_stroke()

    def draw_path(self, points, radius: int | None = None) -> Stroke:
        """Paint one complete gesture given as container-coordinate points."""
        builder = self._require_editor()
        stroke = Stroke(radius=builder.brush_radius if radius is None else int(radius))
        for x, y in points:
            stroke.add(*CoordinateService.to_editing(Point(float(x), float(y)), self.surface))
        builder.apply_stroke(stroke)
        return stroke

    def set_brush_radius(self, radius: int) -> None:
        if self.mask_builder is not None:
            self.mask_builder.set_brush_radius(radius)
        self.brush_radius = int(radius)

    def clear_mask(self) -> None:
        self._require_editor().clear()

    @property
    def can_process(self) -> bool:
        """Whether the "Run Inpaint" action should be enabled."""
        return (self.state is AppState.EDITOR and self.mask_builder is not None
                and self.mask_builder.has_coverage())

    # ─── processing ───────────────────────────────────────────────────
    def process(self, mode: RemovalMode | str = RemovalMode.OBJECT_REMOVAL,
                mask: Raster | None = None, radius: int | None = None) -> InpaintResult | None:
        """
        Run the pipeline with *mask* (an uploaded editing-resolution mask) or,
        when omitted, the mask painted in this session.

        Returns the result, or None when the run failed (see self.error).
        """
        if self.source is None:
            raise InpaintError("Upload an image before running inpainting")
        if mask is None and self.mask_builder is not None and self.mask_builder.has_coverage():
            mask = self.mask_builder.to_raster()

        self.state = AppState.PROCESSING
        self.error = None
        self.failure = None
        try:
            self.result = self.pipeline.run(self.source, mask, mode, radius)
        except (InpaintError, ValueError) as err:
            logger.warning("Session %s: inpainting failed: %s", self.session_id, err)
            self.error = str(err)
            self.failure = err
            self.state = AppState.EDITOR
            return None
        except Exception as err:
            logger.exception("Session %s: inpainting crashed", self.session_id)
            self.error = str(err) or type(err).__name__
            self.failure = err
            self.state = AppState.EDITOR
            raise

        self.reveal = 0.5
        self.state = AppState.COMPARE
        return self.result

    # ─── comparison ───────────────────────────────────────────────────
    def set_reveal(self, reveal: float) -> float:
        self.reveal = self.comparison_service.clamp_reveal(reveal)
        return self.reveal

    def comparison(self) -> Raster:
        if self.result is None:
            raise InpaintError("Nothing to compare yet")
        return self.comparison_service.composite(self.result.original, self.result.processed, self.reveal)

    def back_to_editor(self) -> None:
        if self.source is None:
            raise InpaintError("Upload an image first")
        self.state = AppState.EDITOR

    def reset(self) -> None:
        """Drop everything and go back to the upload screen."""
        self._reset_state()
