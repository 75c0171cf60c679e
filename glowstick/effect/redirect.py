"""
Parameter redirection table.

Each meta-parameter the effect exposes drives exactly one property of
one pooled node. Entries are applied on every reconfiguration, including
those that target a stage currently bypassed, so a stage that is spliced
back in later already carries current values.
"""

from dataclasses import dataclass

from glowstick.core.graph import Node
from glowstick.effect.params import GlowstickParams
from glowstick.effect.pool import NodePool


@dataclass(frozen=True)
class Redirection:
    """Meta-parameter `param` drives `property` of the pool node `node`."""
    param: str
    node: str
    property: str

    def target(self, pool: NodePool) -> Node:
        return getattr(pool, self.node)


REDIRECTIONS = (
    # fixed targets on the main path
    Redirection("chroma", "hue_chroma", "chroma"),
    Redirection("lightness", "hue_chroma", "lightness"),
    Redirection("noise_reduction", "noise_reduction", "iterations"),
    # glow stages, written even while bypassed
    Redirection("softglow_brightness", "softglow", "brightness"),
    Redirection("softglow_radius", "softglow", "glow_radius"),
    Redirection("bloom_radius", "bloom", "radius"),
    Redirection("bloom_softness", "bloom", "softness"),
    Redirection("bloom_strength", "bloom", "strength"),
    # fill colour on the blend side input
    Redirection("color", "color", "value"),
)


def apply_redirections(
    params: GlowstickParams,
    pool: NodePool,
    active_blend: Node | None = None,
    bloom_active: bool = False,
    softglow_active: bool = False,
) -> int:
    """
    Write every redirected meta-parameter into its target node.

    Targets do not depend on the active blend or on the bypass result;
    those arguments are accepted so callers can pass the whole
    reconfiguration result through one call.

    Returns:
        Number of node properties whose value changed
    """
    changed = 0
    for entry in REDIRECTIONS:
        value = getattr(params, entry.param)
        if entry.target(pool).set_property(entry.property, value):
            changed += 1
    return changed
