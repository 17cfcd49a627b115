"""Environment models shared by bodies and flight software."""

from gravsim.environment.atmosphere import (
    AtmosphereResult,
    ExponentialAtmosphere,
    apply_atmospheric_drag,
    nearest_body,
)

__all__ = [
    "AtmosphereResult",
    "ExponentialAtmosphere",
    "apply_atmospheric_drag",
    "nearest_body",
]
