"""
GlowstickEffect - the effect as a host application sees it.

Wraps one EffectState: parameter writes are validated, then trigger a
reconfiguration; rendering pulls the assembled graph.

Example:
    >>> effect = GlowstickEffect(blend_mode="multiply", softglow_brightness=0.1)
    >>> effect.set("bloom_strength", 12.0)
    >>> result = effect.process(image)
"""

from typing import Any

import numpy as np

from glowstick.core.graph import NodeGraph
from glowstick.effect.assembler import EffectState, attach, reconfigure
from glowstick.effect.params import PARAMETERS, GlowstickParams
from glowstick.effect.pool import DEFAULT_PREPROCESS


class GlowstickEffect:
    """
    Neon glow-stick look built from a small, self-rewiring node graph.

    Not safe for concurrent use: callers serialise parameter writes and
    rendering for one instance. Separate instances share nothing.
    """

    def __init__(
        self,
        params: GlowstickParams | dict | None = None,
        preprocess: str = DEFAULT_PREPROCESS,
        verbose: bool = False,
        **values,
    ):
        if isinstance(params, dict):
            params = GlowstickParams.from_dict(params)
        params = params or GlowstickParams()
        if values:
            params = params.with_values(**values)

        self.graph = NodeGraph(verbose=verbose)
        self.state: EffectState = attach(self.graph, params, preprocess=preprocess)

    @property
    def params(self) -> GlowstickParams:
        return self.state.params

    def get(self, name: str) -> Any:
        return getattr(self.state.params, name.replace("-", "_"))

    def set(self, name: str, value: Any) -> "GlowstickEffect":
        """Set one meta-parameter and reconfigure."""
        return self.update(**{name: value})

    def update(self, **changes) -> "GlowstickEffect":
        """
        Set several meta-parameters and reconfigure once.

        Raises:
            ValueError: Unknown parameter or out-of-range value; nothing changes
            ReconfigureError: The graph rejected the new topology
        """
        params = self.state.params.with_values(**changes)
        reconfigure(self.state, params)
        return self

    def reset(self) -> "GlowstickEffect":
        """Restore every parameter to its default."""
        reconfigure(self.state, GlowstickParams())
        return self

    def process(self, image: np.ndarray) -> np.ndarray:
        """Render an HxWx3 float32 RGB image (0-1) through the effect."""
        return self.graph.process(image)

    def apply(self, frame: np.ndarray) -> np.ndarray:
        """FrameFilter interface; same as process()."""
        return self.process(frame)

    def chain_names(self) -> list[str]:
        """Names of the nodes on the current chain, input first."""
        return [node.name for node in self.state.chain()]

    def describe(self) -> str:
        return self.state.describe()

    @staticmethod
    def parameters() -> list:
        """Declarations of every meta-parameter."""
        return list(PARAMETERS)

    def __repr__(self) -> str:
        return f"GlowstickEffect({self.params!r})"
