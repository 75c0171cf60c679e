"""
Effect module - The glowstick meta-filter.

This module provides:
- Meta-parameter declarations and the BlendMode enumeration
- The sub-operation node pool, built once per effect instance
- Blend variant selection and the glow bypass policy
- The parameter redirection table
- attach() / reconfigure(), which assemble and rewire the graph
- GlowstickEffect, the host-facing facade
"""

from glowstick.effect.params import (
    BlendMode,
    MetaParam,
    PARAMETERS,
    GlowstickParams,
    DEFAULT_PARAMS,
    get_param,
    coerce_param,
)
from glowstick.effect.pool import (
    NodePool,
    BLEND_VARIANTS,
    DEFAULT_PREPROCESS,
    create_pool,
    node_names,
    pool_prefix,
)
from glowstick.effect.selector import select_blend, DEFAULT_BLEND_MODE
from glowstick.effect.bypass import BypassState, resolve_bypass
from glowstick.effect.redirect import Redirection, REDIRECTIONS, apply_redirections
from glowstick.effect.assembler import (
    EffectState,
    AttachError,
    ReconfigureError,
    attach,
    reconfigure,
    plan_chain,
    plan_links,
)
from glowstick.effect.glowstick import GlowstickEffect

__all__ = [
    "BlendMode",
    "MetaParam",
    "PARAMETERS",
    "GlowstickParams",
    "DEFAULT_PARAMS",
    "get_param",
    "coerce_param",
    "NodePool",
    "BLEND_VARIANTS",
    "DEFAULT_PREPROCESS",
    "create_pool",
    "node_names",
    "pool_prefix",
    "select_blend",
    "DEFAULT_BLEND_MODE",
    "BypassState",
    "resolve_bypass",
    "Redirection",
    "REDIRECTIONS",
    "apply_redirections",
    "EffectState",
    "AttachError",
    "ReconfigureError",
    "attach",
    "reconfigure",
    "plan_chain",
    "plan_links",
    "GlowstickEffect",
]
