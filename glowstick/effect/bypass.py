"""
Bypass policy for the optional glow stages.

A glow stage is spliced into the chain only when its driving parameter is
strictly above zero. At exactly zero (or below, or for anything that is
not a number) the stage is replaced by a passthrough node, so the chain
never depends on a glow operation being an identity at zero.
"""

import math
from typing import Any, NamedTuple


class BypassState(NamedTuple):
    """Which optional stages are active."""
    bloom_active: bool
    softglow_active: bool


def _is_active(value: Any) -> bool:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return False
    return not math.isnan(value) and value > 0.0


def resolve_bypass(glow_strength: Any, softglow_brightness: Any) -> BypassState:
    """
    Decide whether bloom and soft glow are spliced in.

    Args:
        glow_strength: Bloom strength meta-parameter
        softglow_brightness: Soft glow brightness meta-parameter

    Returns:
        BypassState(bloom_active, softglow_active)
    """
    return BypassState(
        bloom_active=_is_active(glow_strength),
        softglow_active=_is_active(softglow_brightness),
    )
