"""
Persistence of compile settings as JSON files.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from brush_compiler.conversion.brush_clipper import ClipSettings

from .compiler import CompileSettings

logger = logging.getLogger(__name__)


def _settings_to_dict(settings: CompileSettings) -> Dict[str, Any]:
    """Convert CompileSettings to a JSON-serializable dictionary."""
    clip = settings.clip
    return {
        "clip": {
            "seed_radius_scale": clip.seed_radius_scale,
            "weld_radius": clip.weld_radius,
            "grid_snap": clip.grid_snap,
            "boundary_tolerance": clip.boundary_tolerance,
        },
        "max_workers": settings.max_workers,
        "merge_func_groups": settings.merge_func_groups,
        "assign_origins": settings.assign_origins,
        "strip_tool_faces": settings.strip_tool_faces,
        "fail_on_errors": settings.fail_on_errors,
    }


def _dict_to_settings(data: Dict[str, Any]) -> CompileSettings:
    """Create CompileSettings from a dictionary; missing keys keep their defaults."""
    defaults = CompileSettings()
    clip_data = data.get("clip", {})
    clip = ClipSettings(
        seed_radius_scale=float(clip_data.get("seed_radius_scale", defaults.clip.seed_radius_scale)),
        weld_radius=float(clip_data.get("weld_radius", defaults.clip.weld_radius)),
        grid_snap=float(clip_data.get("grid_snap", defaults.clip.grid_snap)),
        boundary_tolerance=clip_data.get("boundary_tolerance", defaults.clip.boundary_tolerance),
    )
    return CompileSettings(
        clip=clip,
        max_workers=int(data.get("max_workers", defaults.max_workers)),
        merge_func_groups=bool(data.get("merge_func_groups", defaults.merge_func_groups)),
        assign_origins=bool(data.get("assign_origins", defaults.assign_origins)),
        strip_tool_faces=bool(data.get("strip_tool_faces", defaults.strip_tool_faces)),
        fail_on_errors=bool(data.get("fail_on_errors", defaults.fail_on_errors)),
    )


def save_settings(settings: CompileSettings, file_path: Path) -> Path:
    """
    Save settings to a JSON file.

    Returns:
        Path to the saved file

    Raises:
        IOError: If the file cannot be written
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(_settings_to_dict(settings), f, indent=2)

    return file_path


def load_settings(file_path: Path) -> Optional[CompileSettings]:
    """
    Load settings from a JSON file.

    Returns:
        CompileSettings if found and valid, None otherwise
    """
    file_path = Path(file_path)
    if not file_path.exists():
        return None

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return _dict_to_settings(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError):
        logger.warning("Ignoring unreadable settings file %s", file_path)
        return None
