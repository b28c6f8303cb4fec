"""
Per-vertex texture coordinates from face projection axes.

Each face carries two world-space projection axes (Valve 220 style), each with
an offset in its fourth component.  UVs are computed on demand per vertex and
normalized by the image size supplied by the material system.
"""

from __future__ import annotations
from typing import Sequence, Tuple

from brush_compiler.geometry.plane_math import Vec3, dot

Vec2 = Tuple[float, float]


def calculate_uv(
    point: Vec3,
    projection_uvs: Sequence[Sequence[float]],
    scale: Sequence[float],
    image_width: int,
    image_height: int,
) -> Vec2:
    """Compute the UV of ``point``.

    Args:
        point: World-space vertex position
        projection_uvs: ``(u_axis, v_axis)``, each ``(x, y, z, offset)``
        scale: Texture scale ``(sx, sy)``; a zero component counts as 1.0
        image_width: Texture width in pixels
        image_height: Texture height in pixels

    Returns:
        ``(u, v)`` in texture space (1.0 = one full image)

    Raises:
        ValueError: If the image size is not positive.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Invalid image size {image_width}x{image_height}")

    u_axis, v_axis = projection_uvs[0], projection_uvs[1]
    scale_x = scale[0] if scale[0] != 0 else 1.0
    scale_y = scale[1] if scale[1] != 0 else 1.0

    axis_u = (u_axis[0] / scale_x, u_axis[1] / scale_x, u_axis[2] / scale_x)
    axis_v = (v_axis[0] / scale_y, v_axis[1] / scale_y, v_axis[2] / scale_y)

    return (
        (dot(point, axis_u) + u_axis[3]) / image_width,
        (dot(point, axis_v) + v_axis[3]) / image_height,
    )
