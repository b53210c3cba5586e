"""
The transform planner: a pure decision function from rotation-corrected
dimensions and bitrate to the action a file needs.

Rules:
- Bitrate above `BITRATE_CAP_BPS` needs a cap.
- Landscape/portrait videos whose long edge exceeds `MAX_LONG_EDGE` are scaled
  so the long edge equals it, keeping the aspect ratio.
- Square videos larger than `MAX_SQUARE_EDGE` are scaled to that square.
- Videos are never upscaled.
- Both thresholds are strict: exactly 1920 px or exactly 10 Mbps is left alone.

The scaled short edge is rounded to the nearest integer with halves rounded up,
computed in integer arithmetic so the result never depends on float error.
"""
from ..config.video import BITRATE_CAP_BPS, MAX_LONG_EDGE, MAX_SQUARE_EDGE
from .media import Orientation, OrientedDimensions, TransformAction, TransformPlan


def scale_edge(edge: int, long_edge: int, limit: int) -> int:
    """Returns round(edge * limit / long_edge), halves rounded up, never below 1."""
    return max(1, (2 * edge * limit + long_edge) // (2 * long_edge))


def plan(oriented: OrientedDimensions, bitrate_bps: int) -> TransformPlan:
    """
    Decides how a file must be transformed.

    Args:
        oriented: The file's logical dimensions and orientation.
        bitrate_bps: The file's bitrate; 0 means unknown and never triggers a cap.

    Returns:
        A `TransformPlan`. The action is `COPY` when nothing is needed,
        `TRANSCODE_RESIZE` whenever a resize is needed (the bitrate cap is
        applied with it), and `TRANSCODE_BITRATE_ONLY` otherwise.
    """
    width, height = oriented.logical_width, oriented.logical_height
    bitrate_cap_needed = bitrate_bps > BITRATE_CAP_BPS

    target_width, target_height = width, height
    resize_needed = False
    if oriented.orientation is Orientation.LANDSCAPE and width > MAX_LONG_EDGE:
        target_width = MAX_LONG_EDGE
        target_height = scale_edge(height, width, MAX_LONG_EDGE)
        resize_needed = True
    elif oriented.orientation is Orientation.PORTRAIT and height > MAX_LONG_EDGE:
        target_height = MAX_LONG_EDGE
        target_width = scale_edge(width, height, MAX_LONG_EDGE)
        resize_needed = True
    elif oriented.orientation is Orientation.SQUARE and width > MAX_SQUARE_EDGE:
        target_width = target_height = MAX_SQUARE_EDGE
        resize_needed = True

    if resize_needed:
        action = TransformAction.TRANSCODE_RESIZE
    elif bitrate_cap_needed:
        action = TransformAction.TRANSCODE_BITRATE_ONLY
    else:
        action = TransformAction.COPY

    return TransformPlan(
        target_width=target_width,
        target_height=target_height,
        resize_needed=resize_needed,
        bitrate_cap_needed=bitrate_cap_needed,
        action=action,
    )
