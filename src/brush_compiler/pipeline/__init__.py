"""
Brush compile pipeline.

Runs validation, clipping and finalization over a parsed map document.
"""

from .compiler import (
    GeometryCompiler,
    CompileSettings,
    CompileResult,
    CompileProgress,
    CompileStage,
    PipelineError,
    CompileCancelledException,
    compile_document,
)
from .settings_storage import save_settings, load_settings

__all__ = [
    'GeometryCompiler',
    'CompileSettings',
    'CompileResult',
    'CompileProgress',
    'CompileStage',
    'PipelineError',
    'CompileCancelledException',
    'compile_document',
    'save_settings',
    'load_settings',
]
