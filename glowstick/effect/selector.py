"""
Blend variant selection.
"""

from typing import Any

from glowstick.core.graph import Node
from glowstick.effect.params import BlendMode
from glowstick.effect.pool import NodePool

DEFAULT_BLEND_MODE = BlendMode.SOFT_LIGHT


def select_blend(mode: Any, pool: NodePool) -> Node:
    """
    Return the pre-built blend node for a blend mode.

    Each of the nine modes maps to its own node. A mode that cannot be
    interpreted falls back to soft light instead of raising.
    """
    resolved = BlendMode.parse(mode)
    if resolved is None:
        resolved = DEFAULT_BLEND_MODE
    return pool.blend_for(resolved)
