"""
In-process image pipeline runtime.

A NodeGraph owns a set of nodes, each running one registered operation.
Nodes have two input pads: "input" (the primary image) and "aux" (a side
input some operations composite with). Rendering pulls the output proxy,
evaluating every upstream node once.

Example:
    graph = NodeGraph()
    blur = graph.create_node("noise-reduction", iterations=2)
    graph.link_many(graph.input_proxy, blur, graph.output_proxy)
    result = graph.process(image)
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, NamedTuple

import numpy as np

from glowstick.processing import get_operation_spec

PADS = ("input", "aux")

INPUT_OPERATION = "input"
OUTPUT_OPERATION = "output"
LOG_LIMIT = 1000


class GraphError(RuntimeError):
    """Node creation, linking or rendering failed."""


class Link(NamedTuple):
    """A connection from a source node's output to a target node's pad."""
    source: "Node"
    target: "Node"
    pad: str = "input"


@dataclass(eq=False)
class Node:
    """
    One operation instance inside a graph.

    Nodes compare by identity; two nodes with the same operation and
    properties are still distinct.
    """
    name: str
    operation: str
    properties: dict[str, Any] = field(default_factory=dict)
    input: "Node | None" = field(default=None, repr=False)
    aux: "Node | None" = field(default=None, repr=False)
    graph: "NodeGraph | None" = field(default=None, repr=False)

    def get_property(self, name: str) -> Any:
        if name not in self.properties:
            raise GraphError(f"Node '{self.name}' ({self.operation}) has no property '{name}'")
        return self.properties[name]

    def set_property(self, name: str, value: Any) -> bool:
        """Set a declared property. Returns True if the value changed."""
        old = self.get_property(name)
        self.properties[name] = value
        try:
            return bool(old != value)
        except (TypeError, ValueError):
            return True

    def source_of(self, pad: str) -> "Node | None":
        if pad not in PADS:
            raise GraphError(f"Unknown pad '{pad}', expected one of {PADS}")
        return getattr(self, pad)


class NodeGraph:
    """
    A graph of image operation nodes between an input and an output proxy.

    Attributes:
        input_proxy: Node standing for the image handed to process()
        output_proxy: Node whose input is the rendered result
        log: Messages recorded while verbose or not
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.log: deque[str] = deque(maxlen=LOG_LIMIT)
        self._nodes: dict[str, Node] = {}
        self.input_proxy = self._add(Node(name="input", operation=INPUT_OPERATION))
        self.output_proxy = self._add(Node(name="output", operation=OUTPUT_OPERATION))

    def log_message(self, message: str):
        """Add message to log and print to terminal when verbose."""
        self.log.append(message)
        if self.verbose:
            print(message)

    def _add(self, node: Node) -> Node:
        node.graph = self
        self._nodes[node.name] = node
        return node

    def unique_name(self, base: str) -> str:
        """base, or base with the first free numeric suffix."""
        if base not in self._nodes:
            return base
        i = 1
        while f"{base}{i}" in self._nodes:
            i += 1
        return f"{base}{i}"

    # -------------------------------------------------------------------------
    # Node creation
    # -------------------------------------------------------------------------

    def create_node(self, operation: str, name: str | None = None, **properties) -> Node:
        """
        Create a node running a registered operation.

        Args:
            operation: Registered operation name (namespace prefix allowed)
            name: Unique node name, derived from the operation if omitted
            **properties: Static property values overriding the defaults

        Raises:
            GraphError: Unknown operation, unknown property, or duplicate name
        """
        try:
            spec = get_operation_spec(operation)
        except ValueError as e:
            raise GraphError(str(e)) from None

        unknown = set(properties) - set(spec.properties)
        if unknown:
            raise GraphError(f"Unknown properties for {spec.name}: {sorted(unknown)}")

        if name is None:
            name = self.unique_name(spec.name)
        elif name in self._nodes:
            raise GraphError(f"Duplicate node name: {name}")

        props = dict(spec.properties)
        props.update(properties)
        node = self._add(Node(name=name, operation=spec.name, properties=props))
        self.log_message(f"  + {name} ({spec.name})")
        return node

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def get_node(self, name: str) -> Node:
        if name not in self._nodes:
            raise GraphError(f"Node not found: {name}")
        return self._nodes[name]

    def remove_node(self, node: Node) -> None:
        """
        Remove a node, disconnecting every pad it feeds.

        Raises:
            GraphError: For proxies and nodes of another graph
        """
        if node not in self:
            raise GraphError(f"Node {getattr(node, 'name', node)!r} does not belong to this graph")
        if node is self.input_proxy or node is self.output_proxy:
            raise GraphError("Graph proxies cannot be removed")
        for other in self._nodes.values():
            for pad in PADS:
                if getattr(other, pad) is node:
                    setattr(other, pad, None)
        del self._nodes[node.name]
        node.graph = None
        self.log_message(f"  - {node.name} ({node.operation})")

    def __contains__(self, node: Node) -> bool:
        return self._nodes.get(getattr(node, "name", None)) is node

    def __len__(self) -> int:
        return len(self._nodes)

    # -------------------------------------------------------------------------
    # Linking
    # -------------------------------------------------------------------------

    def _check_link(self, link: Link) -> None:
        source, target, pad = link
        for node in (source, target):
            if node not in self:
                raise GraphError(f"Node {getattr(node, 'name', node)!r} does not belong to this graph")
        if pad not in PADS:
            raise GraphError(f"Unknown pad '{pad}', expected one of {PADS}")
        if target is self.input_proxy:
            raise GraphError("The input proxy cannot receive connections")
        if source is self.output_proxy:
            raise GraphError("The output proxy cannot feed other nodes")
        if target is self.output_proxy and pad != "input":
            raise GraphError("The output proxy has no aux pad")
        if source is target:
            raise GraphError(f"Node '{source.name}' cannot feed itself")

    @staticmethod
    def _find_cycle(connections: dict[tuple[Node, str], Node]) -> Node | None:
        """Return a node on a cycle in the given connection map, or None."""
        upstream: dict[Node, list[Node]] = {}
        for (target, _pad), source in connections.items():
            upstream.setdefault(target, []).append(source)

        visiting, done = set(), set()

        def visit(node: Node) -> Node | None:
            if node in done:
                return None
            if node in visiting:
                return node
            visiting.add(node)
            for src in upstream.get(node, []):
                hit = visit(src)
                if hit is not None:
                    return hit
            visiting.discard(node)
            done.add(node)
            return None

        for node in list(upstream):
            hit = visit(node)
            if hit is not None:
                return hit
        return None

    def _connections(self) -> dict[tuple[Node, str], Node]:
        connections = {}
        for node in self._nodes.values():
            for pad in PADS:
                source = getattr(node, pad)
                if source is not None:
                    connections[(node, pad)] = source
        return connections

    def connect(self, target: Node, pad: str, source: Node) -> None:
        """
        Connect source's output to one pad of target, replacing any
        existing connection on that pad.

        Raises:
            GraphError: Invalid link or a cycle; the graph is left unchanged
        """
        link = Link(source, target, pad)
        self._check_link(link)
        connections = self._connections()
        connections[(target, pad)] = source
        if self._find_cycle(connections) is not None:
            raise GraphError(f"Linking {source.name} -> {target.name}.{pad} would create a cycle")
        setattr(target, pad, source)

    def link(self, source: Node, target: Node) -> None:
        """Connect source to target's primary input."""
        self.connect(target, "input", source)

    def link_many(self, *nodes: Node) -> None:
        """Link nodes one after another along their primary inputs."""
        for source, target in zip(nodes, nodes[1:]):
            self.link(source, target)

    def connect_aux(self, target: Node, source: Node) -> None:
        """Connect source to target's side input."""
        self.connect(target, "aux", source)

    def disconnect(self, target: Node, pad: str = "input") -> None:
        if target not in self:
            raise GraphError(f"Node {target.name!r} does not belong to this graph")
        target.source_of(pad)
        setattr(target, pad, None)

    def rewire(self, links: list[Link], scope=None) -> None:
        """
        Replace the connections of a set of nodes with the given links.

        With scope=None every connection in the graph is replaced. With a
        scope, only the pads of the scoped nodes are cleared and every link
        must target a scoped node; connections between other nodes stay.

        The new topology is checked in full (ownership, pads, one source per
        pad, no cycles) before any existing connection is touched, so on
        error the previous topology is still in place. Applying the same
        links twice gives the same topology.

        Raises:
            GraphError: If the new topology is invalid
        """
        if scope is None:
            owned = set(self._nodes.values())
        else:
            owned = set(scope)
            for node in owned:
                if node not in self:
                    raise GraphError(f"Node {getattr(node, 'name', node)!r} does not belong to this graph")

        connections = {
            key: source for key, source in self._connections().items() if key[0] not in owned
        }
        planned: dict[tuple[Node, str], Node] = {}
        for link in links:
            link = Link(*link)
            self._check_link(link)
            if link.target not in owned:
                raise GraphError(f"Node '{link.target.name}' is outside the rewired scope")
            key = (link.target, link.pad)
            if key in planned and planned[key] is not link.source:
                raise GraphError(
                    f"Pad {link.target.name}.{link.pad} linked from both "
                    f"{planned[key].name} and {link.source.name}"
                )
            planned[key] = link.source
        connections.update(planned)

        hit = self._find_cycle(connections)
        if hit is not None:
            raise GraphError(f"Rewiring would create a cycle through '{hit.name}'")

        for node in owned:
            node.input = None
            node.aux = None
        for (target, pad), source in planned.items():
            setattr(target, pad, source)

    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------

    def chain(self, source: Node | None = None, sink: Node | None = None) -> list[Node]:
        """
        The primary-input path from source to sink.

        Args:
            source: First node of the path (the input proxy if None)
            sink: Last node of the path (the output proxy if None)

        Raises:
            GraphError: If the sink is not connected back to the source
        """
        source = self.input_proxy if source is None else source
        sink = self.output_proxy if sink is None else sink
        path = [sink]
        seen = {sink}
        node = sink.input
        while node is not None:
            if node in seen:
                raise GraphError(f"Cycle detected at '{node.name}'")
            path.append(node)
            seen.add(node)
            if node is source:
                return path[::-1]
            node = node.input
        raise GraphError(f"Chain is disconnected after '{path[-1].name}'")

    def aux_links(self) -> dict[Node, Node]:
        """Map of target node -> node feeding its side input."""
        return {node: node.aux for node in self._nodes.values() if node.aux is not None}

    def describe(self, source: Node | None = None, sink: Node | None = None) -> str:
        """Human-readable description of the chain from source to sink."""
        parts = []
        for node in self.chain(source, sink):
            label = node.name
            if node.aux is not None:
                label = f"{label}[aux: {node.aux.name}]"
            parts.append(label)
        return " → ".join(parts)

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def process(self, image: np.ndarray) -> np.ndarray:
        """
        Render the output proxy for an input image.

        Args:
            image: HxWx3 float32 RGB image (0-1)

        Returns:
            Rendered HxWx3 float32 image

        Raises:
            GraphError: On a missing connection or a failing operation
        """
        results: dict[Node, np.ndarray] = {}

        def evaluate(node: Node) -> np.ndarray:
            if node in results:
                return results[node]
            if node is self.input_proxy:
                return image

            source = node.input
            if source is None and (node is self.output_proxy or not _is_source(node)):
                raise GraphError(f"Node '{node.name}' has nothing connected to its input")

            inp = evaluate(source) if source is not None else None
            if node is self.output_proxy:
                return inp
            aux = evaluate(node.aux) if node.aux is not None else None

            spec = get_operation_spec(node.operation)
            try:
                out = spec.func(inp, aux, **node.properties)
            except (ValueError, TypeError) as e:
                raise GraphError(f"Operation {node.operation} failed in '{node.name}': {e}") from e
            results[node] = out
            return out

        return evaluate(self.output_proxy)


def _is_source(node: Node) -> bool:
    return get_operation_spec(node.operation).source
