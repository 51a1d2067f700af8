"""Shared fixtures: synthetic 478-point faces with controllable geometry."""

import math
from typing import Dict, Tuple

import pytest
import torch

NUM_POINTS = 478

# Frontal face laid out in normalized coordinates. Every index not listed
# sits at the image center.
BASE_POINTS: Dict[int, Tuple[float, float, float]] = {
    1: (0.50, 0.55, -0.05),    # nose tip
    4: (0.50, 0.56, -0.05),    # nose bottom
    152: (0.50, 0.75, 0.0),    # chin
    33: (0.40, 0.45, 0.0),     # right eye outer
    133: (0.46, 0.45, 0.0),    # right eye inner
    362: (0.54, 0.45, 0.0),    # left eye inner
    263: (0.60, 0.45, 0.0),    # left eye outer
    308: (0.55, 0.65, 0.0),    # mouth
    78: (0.45, 0.65, 0.0),     # mouth
}

# Eyelid points (upper, lower) by x position; eye corners sit at y = 0.45
EYELIDS = {
    0.42: (160, 144),
    0.44: (158, 153),
    0.56: (385, 380),
    0.58: (387, 373),
}

# Eye corner width is 0.06, so a lid half-opening of 0.03 * ear gives that EAR
EYE_HALF_WIDTH = 0.03


def make_face(ear: float = 0.3,
              iris: Tuple[float, float] = (0.0, 0.0),
              yaw: float = 0.0,
              shift: Tuple[float, float] = (0.0, 0.0)) -> torch.Tensor:
    """
    Build a (478, 3) landmark tensor.

    Args:
        ear: Eye aspect ratio of both eyes
        iris: Normalized iris displacement from each eye's anchor corner
        yaw: Rotation of the whole face about the vertical axis through
             x = 0.5 (radians); the tracker reports it as yaw = -yaw
        shift: Normalized translation applied to every point
    """
    points = torch.full((NUM_POINTS, 3), 0.5, dtype=torch.float64)
    points[:, 2] = 0.0

    for index, xyz in BASE_POINTS.items():
        points[index] = torch.tensor(xyz, dtype=torch.float64)

    h = EYE_HALF_WIDTH * ear
    for x, (upper, lower) in EYELIDS.items():
        points[upper] = torch.tensor([x, 0.45 - h, 0.0], dtype=torch.float64)
        points[lower] = torch.tensor([x, 0.45 + h, 0.0], dtype=torch.float64)

    # Iris centers relative to their anchors (468 -> 33, 473 -> 362)
    points[468] = points[33] + torch.tensor([iris[0], iris[1], 0.0], dtype=torch.float64)
    points[473] = points[362] + torch.tensor([iris[0], iris[1], 0.0], dtype=torch.float64)

    if yaw:
        # x and z share the same pixel scale, so this is a rigid rotation
        c, s = math.cos(yaw), math.sin(yaw)
        dx = points[:, 0] - 0.5
        z = points[:, 2].clone()
        points[:, 0] = 0.5 + dx * c + z * s
        points[:, 2] = -dx * s + z * c

    points[:, 0] += shift[0]
    points[:, 1] += shift[1]
    return points


@pytest.fixture
def face():
    """Factory for synthetic landmark tensors; see ``make_face``."""
    return make_face
