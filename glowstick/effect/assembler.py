"""
Graph assembler.

attach() builds the node pool once and performs the first
reconfiguration; reconfigure() runs on every parameter change:

    input → noise-reduction → preprocess → <blend> → crop → hue-chroma
          → (bloom | bloom-bypass) → (softglow | softglow-bypass) → output

with the fill colour on the active blend's side input and the untouched
input on the crop's side input. Every reconfiguration replaces the
connections of the pool's nodes in one scoped rewire() call, so a failed
rebuild leaves the previous chain in place and a repeated rebuild
converges on the same topology. Host connections outside the pool are
never touched.
"""

from dataclasses import dataclass

from glowstick.core.graph import GraphError, Link, Node, NodeGraph
from glowstick.effect.bypass import BypassState, resolve_bypass
from glowstick.effect.params import DEFAULT_PARAMS, GlowstickParams
from glowstick.effect.pool import DEFAULT_PREPROCESS, NodePool, create_pool
from glowstick.effect.redirect import apply_redirections
from glowstick.effect.selector import select_blend


class AttachError(GraphError):
    """The effect could not be built; the instance is unusable."""


class ReconfigureError(GraphError):
    """A reconfiguration failed; the previous topology is still active."""


@dataclass
class EffectState:
    """
    Everything one effect instance owns between reconfigurations.

    Passed explicitly into every reconfigure() call.
    """
    graph: NodeGraph
    pool: NodePool
    params: GlowstickParams = DEFAULT_PARAMS
    active_blend: Node | None = None
    bypass: BypassState = BypassState(False, False)
    generation: int = 0

    def chain(self) -> list[Node]:
        return self.graph.chain(self.pool.input, self.pool.output)

    def describe(self) -> str:
        return self.graph.describe(self.pool.input, self.pool.output)


def plan_chain(pool: NodePool, active_blend: Node, bypass: BypassState) -> list[Node]:
    """Ordered primary-input chain for one reconfiguration."""
    return [
        pool.input,
        pool.noise_reduction,
        pool.preprocess,
        active_blend,
        pool.crop,
        pool.hue_chroma,
        pool.bloom if bypass.bloom_active else pool.bloom_bypass,
        pool.softglow if bypass.softglow_active else pool.softglow_bypass,
        pool.output,
    ]


def plan_links(pool: NodePool, chain: list[Node], active_blend: Node) -> list[Link]:
    """Every connection of the assembled graph: chain plus both side inputs."""
    links = [Link(src, dst, "input") for src, dst in zip(chain, chain[1:])]
    links.append(Link(pool.color, active_blend, "aux"))
    links.append(Link(pool.input, pool.crop, "aux"))
    return links


def reconfigure(state: EffectState, params: GlowstickParams | None = None) -> list[Node]:
    """
    Rebuild the chain for the given parameters.

    Args:
        state: Effect state from attach()
        params: New parameter values; the state's current ones if None

    Returns:
        The new chain, input proxy first

    Raises:
        ReconfigureError: If the graph rejects the new topology. The state
            and the graph keep their previous configuration.
    """
    params = state.params if params is None else params
    pool = state.pool

    active_blend = select_blend(params.blend_mode, pool)
    bypass = resolve_bypass(params.bloom_strength, params.softglow_brightness)
    chain = plan_chain(pool, active_blend, bypass)

    try:
        state.graph.rewire(plan_links(pool, chain, active_blend), scope=pool.owned_nodes())
    except GraphError as e:
        raise ReconfigureError(f"Reconfiguration failed, keeping previous graph: {e}") from e

    changed = apply_redirections(
        params, pool, active_blend, bypass.bloom_active, bypass.softglow_active
    )

    state.params = params
    state.active_blend = active_blend
    state.bypass = bypass
    state.generation += 1

    description = " → ".join(node.name for node in chain)
    state.graph.log_message(f"Reconfigured ({state.generation}): {description} [{changed} changed]")
    return chain


def attach(
    graph: NodeGraph | None = None,
    params: GlowstickParams | None = None,
    preprocess: str = DEFAULT_PREPROCESS,
    source: Node | None = None,
    sink: Node | None = None,
) -> EffectState:
    """
    Build the effect inside a graph.

    Creates the node pool, then runs the first reconfiguration. Only the
    pool's own nodes and the sink's primary input are ever rewired, so
    connections between the host's nodes survive, and several effects can
    share one graph (each pool gets its own node-name prefix).

    Args:
        graph: Host graph; a new one is created if None
        params: Initial parameters (defaults if None)
        preprocess: Chain string for the preprocessing node
        source: Host node feeding the effect (the input proxy if None)
        sink: Host node fed by the effect (the output proxy if None)

    Raises:
        AttachError: If any node cannot be created or linked. The graph is
            left without any of the effect's nodes.
    """
    graph = NodeGraph() if graph is None else graph
    params = DEFAULT_PARAMS if params is None else params

    try:
        pool = create_pool(graph, preprocess, source=source, sink=sink)
    except GraphError as e:
        raise AttachError(f"Cannot attach glowstick effect: {e}") from e

    state = EffectState(graph=graph, pool=pool, params=params)
    try:
        reconfigure(state, params)
    except GraphError as e:
        pool.release()
        raise AttachError(f"Cannot attach glowstick effect: {e}") from e

    graph.log_message(f"Attached glowstick effect with {len(pool)} nodes")
    return state
