"""
Sub-operation pool.

Every node the effect can ever use is created once, when the effect is
attached, and lives as long as the effect. Reconfiguration only rewires
these nodes; it never creates or destroys any. Node names carry a
per-pool prefix so several effects can share one graph.
"""

from dataclasses import dataclass

from glowstick.core.config import DEFAULT_PREPROCESS
from glowstick.core.graph import GraphError, Node, NodeGraph
from glowstick.effect.params import BlendMode
from glowstick.processing.blend import BlendSpace, LayerMode
from glowstick.processing.graph_string import parse_chain

# Static configuration of each blend variant: (layer mode, blend space)
BLEND_VARIANTS = {
    BlendMode.GRAIN_MERGE: (LayerMode.GRAIN_MERGE, BlendSpace.AUTO),
    BlendMode.HSL_COLOR: (LayerMode.HSL_COLOR, BlendSpace.AUTO),
    BlendMode.SOFT_LIGHT: (LayerMode.SOFTLIGHT, BlendSpace.AUTO),
    BlendMode.OVERLAY: (LayerMode.OVERLAY, BlendSpace.AUTO),
    BlendMode.BURN: (LayerMode.BURN, BlendSpace.RGB_PERCEPTUAL),
    BlendMode.LCH_COLOR: (LayerMode.LCH_COLOR, BlendSpace.LAB),
    BlendMode.MULTIPLY: (LayerMode.MULTIPLY, BlendSpace.RGB_PERCEPTUAL),
    BlendMode.LINEAR_LIGHT: (LayerMode.LINEAR_LIGHT, BlendSpace.RGB_PERCEPTUAL),
    BlendMode.HARD_LIGHT: (LayerMode.HARDLIGHT, BlendSpace.AUTO),
}


@dataclass(frozen=True)
class NodePool:
    """
    All nodes owned by one effect instance.

    input and output are the effect's boundary: the graph proxies, or
    host nodes the effect was attached between. The effect rewires the
    output's primary input but never the input's pads.
    """
    graph: NodeGraph
    input: Node
    output: Node
    color: Node
    crop: Node
    bloom: Node
    softglow: Node
    bloom_bypass: Node
    softglow_bypass: Node
    hue_chroma: Node
    noise_reduction: Node
    preprocess: Node
    blends: dict  # BlendMode -> Node
    prefix: str = ""

    def internal_nodes(self) -> list[Node]:
        """Nodes created for this pool, boundary excluded."""
        fixed = [
            self.color, self.crop, self.bloom, self.softglow, self.bloom_bypass,
            self.softglow_bypass, self.hue_chroma, self.noise_reduction, self.preprocess,
        ]
        return fixed + list(self.blends.values())

    def nodes(self) -> list[Node]:
        """Every pooled node, boundary included."""
        return [self.input, self.output] + self.internal_nodes()

    def owned_nodes(self) -> list[Node]:
        """Nodes whose pads this pool rewires: its own nodes and the output."""
        return self.internal_nodes() + [self.output]

    def blend_for(self, mode: BlendMode) -> Node:
        return self.blends[mode]

    def release(self) -> None:
        """Remove the pool's own nodes from the graph."""
        for node in self.internal_nodes():
            if node in self.graph:
                self.graph.remove_node(node)

    def __len__(self) -> int:
        return len(self.nodes())


def node_names(prefix: str = "") -> list[str]:
    """Names of the nodes a pool creates."""
    names = [f"blend-{mode.value}" for mode in BLEND_VARIANTS]
    names += [
        "color", "crop", "bloom", "softglow", "bloom-bypass", "softglow-bypass",
        "hue-chroma", "noise-reduction", "preprocess",
    ]
    return [prefix + name for name in names]


def pool_prefix(graph: NodeGraph) -> str:
    """
    First node-name prefix under which a pool fits into the graph.

    The first effect in a graph gets bare names; later ones get
    "glowstick1-", "glowstick2-" and so on.
    """
    taken = {node.name for node in graph.nodes}
    prefix, i = "", 0
    while taken.intersection(node_names(prefix)):
        i += 1
        prefix = f"glowstick{i}-"
    return prefix


def create_pool(
    graph: NodeGraph,
    preprocess: str = DEFAULT_PREPROCESS,
    source: Node | None = None,
    sink: Node | None = None,
    prefix: str | None = None,
) -> NodePool:
    """
    Create every sub-operation node in one pass.

    Args:
        graph: Graph that will own the nodes
        preprocess: Chain string run by the preprocessing node
        source: Node feeding the effect (the graph's input proxy if None)
        sink: Node the effect feeds (the graph's output proxy if None)
        prefix: Node-name prefix; the first free one if None

    Raises:
        GraphError: If any node cannot be created. Nodes created before the
            failure are removed again.
    """
    try:
        parse_chain(preprocess)
    except ValueError as e:
        raise GraphError(f"Invalid preprocessing chain: {e}") from e

    source = graph.input_proxy if source is None else source
    sink = graph.output_proxy if sink is None else sink
    for node in (source, sink):
        if node not in graph:
            raise GraphError(f"Boundary node {getattr(node, 'name', node)!r} does not belong to the graph")
    if source is sink or source is graph.output_proxy or sink is graph.input_proxy:
        raise GraphError("Invalid effect boundary")

    prefix = pool_prefix(graph) if prefix is None else prefix
    created: list[Node] = []

    def make(operation: str, name: str, **properties) -> Node:
        node = graph.create_node(operation, name=prefix + name, **properties)
        created.append(node)
        return node

    try:
        blends = {}
        for mode, (layer_mode, blend_space) in BLEND_VARIANTS.items():
            blends[mode] = make(
                "gimp:layer-mode",
                f"blend-{mode.value}",
                layer_mode=layer_mode,
                blend_space=blend_space,
                composite_mode=0,
            )

        return NodePool(
            graph=graph,
            input=source,
            output=sink,
            color=make("gegl:color", "color"),
            crop=make("gegl:crop", "crop"),
            bloom=make("gegl:bloom", "bloom"),
            softglow=make("gegl:softglow", "softglow"),
            bloom_bypass=make("gegl:nop", "bloom-bypass"),
            softglow_bypass=make("gegl:nop", "softglow-bypass"),
            hue_chroma=make("gegl:hue-chroma", "hue-chroma"),
            noise_reduction=make("gegl:noise-reduction", "noise-reduction"),
            preprocess=make("gegl:graph", "preprocess", string=preprocess),
            blends=blends,
            prefix=prefix,
        )
    except GraphError:
        for node in created:
            graph.remove_node(node)
        raise
