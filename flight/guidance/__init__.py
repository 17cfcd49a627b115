"""Guidance algorithms for rockets.

Guidance computes the desired heading and thrust from the current state
and mission objectives.

Available algorithms:
    AscentProfile: Launch, gravity turn, coast and circularization gates
    TransferProfile: Hohmann window, escape burn, coast and capture gates
"""

from flight.guidance.ascent import AscentProfile, LocalFrame, local_frame
from flight.guidance.transfer import (
    TransferPlan,
    TransferProfile,
    plan_hohmann_transfer,
    window_error,
)

__all__ = [
    "AscentProfile",
    "LocalFrame",
    "TransferPlan",
    "TransferProfile",
    "local_frame",
    "plan_hohmann_transfer",
    "window_error",
]
