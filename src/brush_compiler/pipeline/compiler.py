"""
Geometry compiler for parsed brush maps.

Orchestrates input validation, brush clipping, bounds regeneration and origin
assignment over a whole MapDocument.  Per-face failures never abort the
compile; they are reported as validation issues in the CompileResult.

Brushes can be clipped on a thread pool.  Workers only compute clip results;
faces are updated on the calling thread in original brush order, so the output
does not depend on the number of workers.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from brush_compiler.conversion.bounds import assign_brush_origins, map_boundaries
from brush_compiler.conversion.brush_clipper import BrushClipper, BrushClipResult, ClipSettings
from brush_compiler.conversion.map_data import FUNC_GROUP, WORLDSPAWN, Brush, FaceState, MapDocument
from brush_compiler.conversion.mesh_builder import MaterialLookup, default_material_lookup
from brush_compiler.geometry.bounds import Aabb
from brush_compiler.validation.checks import check_clip_result, validate_document
from brush_compiler.validation.core import (
    Severity,
    ValidationError,
    ValidationResult,
    ValidationStage,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class CompileStage(Enum):
    PREPARE = "prepare"
    CLIP_BRUSHES = "clip_brushes"
    FINALIZE = "finalize"
    COMPLETE = "complete"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class PipelineError(Exception):
    pass


class CompileCancelledException(PipelineError):
    pass


# ---------------------------------------------------------------------------
# Settings / Result dataclasses
# ---------------------------------------------------------------------------

@dataclass
class CompileSettings:
    # Clipping tolerances
    clip: ClipSettings = field(default_factory=ClipSettings)

    # Threads used to clip brushes; 1 clips on the calling thread
    max_workers: int = 1

    # Document passes
    merge_func_groups: bool = True
    assign_origins: bool = True
    # Drop faces whose material is both nodraw and nocollision after clipping
    strip_tool_faces: bool = False

    # Raise ValidationError when FAIL issues were found
    fail_on_errors: bool = False


@dataclass
class CompileProgress:
    stage: CompileStage
    stage_progress: float
    overall_progress: float
    message: str
    elapsed_time: float

    @property
    def percentage(self) -> int:
        return int(self.overall_progress * 100)


@dataclass
class CompileResult:
    success: bool
    issues: ValidationResult = field(default_factory=ValidationResult)
    stages_completed: List[CompileStage] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)
    map_bounds: Optional[Aabb] = None

    @property
    def total_time(self) -> float:
        return self.metrics.get("total_time", 0.0)

    def add_error(self, error: str, stage: Optional[CompileStage] = None):
        if stage:
            error = f"[{stage.value}] {error}"
        self.errors.append(error)

    def add_warning(self, warning: str, stage: Optional[CompileStage] = None):
        if stage:
            warning = f"[{stage.value}] {warning}"
        self.warnings.append(warning)


# ---------------------------------------------------------------------------
# Progress tracker
# ---------------------------------------------------------------------------

class ProgressTracker:
    STAGE_WEIGHTS = {
        CompileStage.PREPARE: 0.10,
        CompileStage.CLIP_BRUSHES: 0.80,
        CompileStage.FINALIZE: 0.10,
    }

    def __init__(self):
        self.start_time = time.time()

    def calculate_progress(self, current_stage: CompileStage, stage_progress: float) -> CompileProgress:
        stages = list(self.STAGE_WEIGHTS.keys())
        if current_stage not in stages:
            overall = 1.0
        else:
            idx = stages.index(current_stage)
            completed = sum(self.STAGE_WEIGHTS[s] for s in stages[:idx])
            overall = completed + self.STAGE_WEIGHTS[current_stage] * stage_progress
        return CompileProgress(
            stage=current_stage,
            stage_progress=stage_progress,
            overall_progress=min(overall, 1.0),
            message="",
            elapsed_time=time.time() - self.start_time,
        )


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------

class GeometryCompiler:
    """Turns the brushes of a MapDocument into clipped face polygons."""

    def __init__(self, settings: Optional[CompileSettings] = None,
                 material_lookup: Optional[MaterialLookup] = None):
        self.settings = settings or CompileSettings()
        self.material_lookup = material_lookup or default_material_lookup
        self.is_running = False
        self.is_cancelled = False
        self.current_stage = CompileStage.PREPARE
        self.progress_tracker = ProgressTracker()
        self.progress_callback: Optional[Callable[[CompileProgress], None]] = None
        self._validate_settings()
        self.clipper = BrushClipper(self.settings.clip)

    # -- helpers --

    def set_progress_callback(self, callback: Callable[[CompileProgress], None]):
        self.progress_callback = callback

    def cancel(self):
        self.is_cancelled = True

    def _check_cancellation(self):
        if self.is_cancelled:
            raise CompileCancelledException("Compile cancelled by user")

    def _update_progress(self, stage_progress: float, message: str):
        if self.is_cancelled or not self.progress_callback:
            return
        progress = self.progress_tracker.calculate_progress(self.current_stage, stage_progress)
        progress.message = message
        try:
            self.progress_callback(progress)
        except Exception:
            logger.debug("Progress callback failed", exc_info=True)

    def _validate_settings(self):
        errors = []
        clip = self.settings.clip
        if clip.seed_radius_scale <= 0:
            errors.append("Seed radius scale must be positive")
        if clip.weld_radius < 0:
            errors.append("Weld radius cannot be negative")
        if clip.grid_snap < 0:
            errors.append("Grid snap cannot be negative")
        if clip.boundary_tolerance is not None and clip.boundary_tolerance < 0:
            errors.append("Boundary tolerance cannot be negative")
        if self.settings.max_workers < 1:
            errors.append("Worker count must be at least 1")
        if errors:
            raise PipelineError(f"Invalid settings: {'; '.join(errors)}")

    def _add_issues(self, result: CompileResult, issues: ValidationResult):
        result.issues.merge(issues)
        for issue in issues.issues:
            if issue.severity == Severity.FAIL:
                result.add_error(issue.format(), self.current_stage)
            elif issue.severity == Severity.WARN:
                result.add_warning(issue.format(), self.current_stage)

    # -- stages --

    def _prepare(self, document: MapDocument, result: CompileResult):
        self.current_stage = CompileStage.PREPARE
        self._check_cancellation()
        self._update_progress(0.0, "Preparing document...")

        if any(face.state is not FaceState.UNCLIPPED
               for _, _, brush in document.brushes() for face in brush.faces):
            raise PipelineError("Document was already compiled")

        if self.settings.merge_func_groups:
            merged = document.merge_into(WORLDSPAWN, FUNC_GROUP)
            result.metrics["merged_entities"] = merged

        self._add_issues(result, validate_document(document))

        result.metrics["entity_count"] = len(document.entities)
        result.metrics["brush_count"] = document.brush_count
        result.metrics["face_count"] = sum(len(b.faces) for _, _, b in document.brushes())
        logger.info("Compiling %d entities, %d brushes",
                    result.metrics["entity_count"], result.metrics["brush_count"])
        self._update_progress(1.0, "Document prepared")

    def _clip_job(self, brush: Brush) -> BrushClipResult:
        self._check_cancellation()
        return self.clipper.run(brush)

    def _clip_brushes(self, document: MapDocument, result: CompileResult):
        self.current_stage = CompileStage.CLIP_BRUSHES
        self._check_cancellation()
        self._update_progress(0.0, "Clipping brushes...")

        jobs: List[Tuple[int, int, Brush]] = list(document.brushes())
        clip_issues = ValidationResult(stage=ValidationStage.CLIP)
        workers = min(self.settings.max_workers, max(len(jobs), 1))
        result.metrics["workers"] = workers

        if workers > 1:
            executor = ThreadPoolExecutor(max_workers=workers)
            try:
                # map() yields in submission order, i.e. brush order
                clip_results = executor.map(self._clip_job, [brush for _, _, brush in jobs])
                self._apply_results(jobs, clip_results, clip_issues)
            finally:
                executor.shutdown(wait=True, cancel_futures=True)
        else:
            clip_results = (self._clip_job(brush) for _, _, brush in jobs)
            self._apply_results(jobs, clip_results, clip_issues)

        faces = [face for _, _, brush in jobs for face in brush.faces]
        result.metrics["faces_clipped"] = sum(1 for f in faces if f.state is FaceState.CLIPPED)
        result.metrics["faces_unresolved"] = sum(1 for f in faces if f.state is FaceState.UNRESOLVED)
        self._add_issues(result, clip_issues)
        logger.info("Clipped %d faces, %d unresolved",
                    result.metrics["faces_clipped"], result.metrics["faces_unresolved"])

    def _apply_results(self, jobs, clip_results, clip_issues: ValidationResult):
        total = len(jobs)
        for done, ((entity_index, brush_index, brush), clip_result) in enumerate(zip(jobs, clip_results), 1):
            self._check_cancellation()
            self.clipper.apply(brush, clip_result, entity_index, brush_index)
            for issue in check_clip_result(clip_result, entity_index, brush_index):
                clip_issues.add_issue(issue)
            self._update_progress(done / total, f"Clipped brush {done}/{total}")

    def _finalize(self, document: MapDocument, result: CompileResult):
        self.current_stage = CompileStage.FINALIZE
        self._check_cancellation()
        self._update_progress(0.0, "Finalizing...")

        if self.settings.strip_tool_faces:
            def is_tool_face(face):
                info = self.material_lookup(face.material_name)
                return info.nodraw and info.nocollision
            result.metrics["faces_stripped"] = document.remove_faces(is_tool_face)

        for entity in document.entities:
            entity.regenerate_bounds()

        if self.settings.assign_origins:
            result.metrics["origins_assigned"] = assign_brush_origins(document)

        result.map_bounds = map_boundaries(document)
        self._update_progress(1.0, "Compile finished")

    # -- main entry --

    def compile(self, document: MapDocument) -> CompileResult:
        """Compile every brush of ``document`` in place.

        Raises:
            PipelineError: If a compile is already running on this instance.
            ValidationError: If ``fail_on_errors`` is set and FAIL issues were found.
        """
        if self.is_running:
            raise PipelineError("Compiler is already running")
        self.is_running = True
        self.is_cancelled = False
        self.progress_tracker = ProgressTracker()
        result = CompileResult(success=False)
        start_time = time.time()

        try:
            stages = [
                (self._prepare, "Prepare"),
                (self._clip_brushes, "Clip brushes"),
                (self._finalize, "Finalize"),
            ]
            for stage_fn, desc in stages:
                try:
                    logger.debug("Stage: %s", desc)
                    stage_fn(document, result)
                    result.stages_completed.append(self.current_stage)
                except CompileCancelledException:
                    result.add_error("Compile cancelled by user")
                    return result
                except PipelineError as e:
                    result.add_error(str(e), self.current_stage)
                    return result

            self.current_stage = CompileStage.COMPLETE
            result.success = True
            result.metrics["total_time"] = time.time() - start_time
            logger.info("Compile complete in %.2fs", result.metrics["total_time"])
        except Exception as e:
            logger.exception("Unexpected compile error")
            result.add_error(f"Unexpected error: {e}")
        finally:
            self.is_running = False

        if self.settings.fail_on_errors and result.issues.failed:
            raise ValidationError(result.issues)
        return result


def compile_document(document: MapDocument, settings: Optional[CompileSettings] = None,
                     material_lookup: Optional[MaterialLookup] = None) -> CompileResult:
    """Convenience function to compile a document in one call."""
    return GeometryCompiler(settings, material_lookup).compile(document)
