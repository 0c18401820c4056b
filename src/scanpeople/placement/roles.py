"""Roles of the people placed in a scan and their random appearance."""

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

ROLES = ("Teacher", "Student", "Admin", "Visitor", "Staff", "Parent", "Custodian", "Other")
SINGLE_ROLES = ("Teacher", "Student")
MIXED = "Mixed"

MIXED_WEIGHTS: Dict[str, float] = {
    "Student": 0.5,
    "Teacher": 0.15,
    "Admin": 0.05,
    "Staff": 0.1,
    "Visitor": 0.1,
    "Parent": 0.1,
}

# (body, accent) colours per role
FIGURE_COLORS: Dict[str, Tuple[str, str]] = {
    "Teacher": ("#2D5A7B", "#4A90B8"),
    "Student": ("#4A6741", "#6B9B5E"),
    "Admin": ("#5B4A7B", "#8B7AAF"),
    "Visitor": ("#7B5A3A", "#A88B6A"),
    "Staff": ("#3A6B6B", "#5A9E9E"),
    "Parent": ("#6B4A5A", "#9E7A8B"),
    "Custodian": ("#5A5A3A", "#8B8B6A"),
    "Other": ("#4A4A5B", "#7A7A8B"),
}

COLOR_COUNT = 8
POSE_COUNT = 100


@dataclass(frozen=True)
class Appearance:
    """Randomised look of a single figure."""

    color_index: int
    pose_index: int
    flip: bool


def role_colors(role: str) -> Tuple[str, str]:
    return FIGURE_COLORS.get(role, FIGURE_COLORS["Other"])


def weighted_random_role(rng: np.random.Generator) -> str:
    """Draw a role for a mixed crowd."""
    r = rng.random()
    cumulative = 0.0
    for role, weight in MIXED_WEIGHTS.items():
        cumulative += weight
        if r <= cumulative:
            return role
    return "Student"


def resolve_role(role: str, rng: np.random.Generator) -> str:
    """Return ``role`` itself, or a weighted draw when it is ``Mixed``."""
    if role == MIXED:
        return weighted_random_role(rng)
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role!r}")
    return role


def random_appearance(rng: np.random.Generator) -> Appearance:
    return Appearance(
        color_index=int(rng.integers(0, COLOR_COUNT)),
        pose_index=int(rng.integers(0, POSE_COUNT)),
        flip=bool(rng.random() > 0.5),
    )
