"""
Orientation resolution: turns raw stream dimensions and rotation metadata into
the dimensions the viewer actually sees.
"""
from .media import MediaProbe, Orientation, OrientedDimensions


def classify(width: int, height: int) -> Orientation:
    if width > height:
        return Orientation.LANDSCAPE
    if height > width:
        return Orientation.PORTRAIT
    return Orientation.SQUARE


def resolve(probe: MediaProbe) -> OrientedDimensions:
    """
    Applies the probe's rotation to its raw width and height.

    A 90/270/-90 degree rotation transposes the frame, so the logical width is
    the stored height and vice versa. 180 degrees, no rotation and an unknown
    rotation keep the raw dimensions.

    Args:
        probe: Metadata for one file.

    Returns:
        The rotation-corrected dimensions and their orientation class.
    """
    if probe.rotation.transposes:
        width, height = probe.height, probe.width
    else:
        width, height = probe.width, probe.height
    return OrientedDimensions(width, height, classify(width, height))
