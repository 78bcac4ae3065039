"""
Aggregates flow definitions from many Mule configuration files into one graph.

Nodes are keyed by (file path, flow name): registering the same pair twice
returns the existing node. Node ids are sanitized flow names, suffixed with a
counter when two flows sanitize to the same id. References are resolved only
after every file has been registered, so a flow may reference a flow declared
in a later file. When several files declare the same name, references bind to
the first one registered. Names that are never declared get a placeholder
node of type `unknown`, so no edge is ever dropped.
"""
import logging
from typing import Dict, List, Mapping, Optional, Set, Tuple

from .flow_extractor import FlowDefinition, extract_flow_definitions, extract_referenced_flows
from .models import UNKNOWN_FILE, FlowEdge, FlowNode, FlowType, MuleFlowGraph
from .sanitizer import sanitize_id

logger = logging.getLogger(__name__)


class MuleFlowGraphBuilder:
    """
    Builds a MuleFlowGraph. All state lives on the instance; use one builder per graph.
    """

    def __init__(self) -> None:
        self.nodes: Dict[str, FlowNode] = {}
        self.edges: List[FlowEdge] = []
        self._node_id_by_key: Dict[Tuple[str, str], str] = {}
        self._nodes_by_name: Dict[str, List[FlowNode]] = {}
        self._used_ids: Set[str] = set()

    def _allocate_id(self, name: str) -> str:
        base_id = sanitize_id(name)
        candidate = base_id
        counter = 0
        while candidate in self._used_ids:
            counter += 1
            candidate = f"{base_id}_{counter}"
        self._used_ids.add(candidate)
        return candidate

    def register_node(self, definition: FlowDefinition) -> FlowNode:
        """
        Registers a definition as a node, or returns the node already registered
        for the same (file path, name).
        """
        key = (definition.file_path, definition.name)
        existing_id = self._node_id_by_key.get(key)
        if existing_id is not None:
            return self.nodes[existing_id]

        node = FlowNode(
            id=self._allocate_id(definition.name),
            name=definition.name,
            file_path=definition.file_path,
            type=definition.type,
            components=definition.components,
        )
        self.nodes[node.id] = node
        self._node_id_by_key[key] = node.id
        self._nodes_by_name.setdefault(definition.name, []).append(node)
        return node

    def ensure_named_node(self, flow_name: str) -> FlowNode:
        """Returns the first node registered under `flow_name`, creating a placeholder if there is none."""
        registered = self._nodes_by_name.get(flow_name)
        if registered:
            return registered[0]

        logger.warning(f"Flow reference '{flow_name}' does not match any declared flow; adding a placeholder node.")
        placeholder = FlowDefinition(
            name=flow_name,
            type=FlowType.UNKNOWN,
            file_path=UNKNOWN_FILE,
            body="",
            components=[],
        )
        return self.register_node(placeholder)

    def add_file(self, file_path: str, content: Optional[str]) -> List[FlowDefinition]:
        definitions = extract_flow_definitions(content, file_path)
        for definition in definitions:
            self.register_node(definition)
        logger.debug(f"Registered {len(definitions)} flow definitions from {file_path}")
        return definitions

    def resolve_references(self, definitions: List[FlowDefinition]) -> None:
        for definition in definitions:
            source = self.register_node(definition)
            for target_name in extract_referenced_flows(definition.body):
                target = self.ensure_named_node(target_name)
                self.edges.append(FlowEdge(
                    source=source.id,
                    target=target.id,
                    source_file=source.file_path,
                    target_file=target.file_path,
                ))

    def build(self, files: Mapping[str, str]) -> MuleFlowGraph:
        all_definitions: List[FlowDefinition] = []
        for file_path, content in files.items():
            all_definitions.extend(self.add_file(file_path, content))
        self.resolve_references(all_definitions)

        logger.info(f"Built flow graph with {len(self.nodes)} nodes and {len(self.edges)} edges from {len(files)} files")
        return MuleFlowGraph(nodes=list(self.nodes.values()), edges=list(self.edges))


def build_mule_flow_graph(files: Mapping[str, str]) -> MuleFlowGraph:
    """
    Builds the flow graph of a Mule application.

    Args:
        files (Mapping[str, str]): Normalized file path mapped to the file's XML text.

    Returns:
        MuleFlowGraph: Nodes in registration order and one edge per flow reference.
    """
    return MuleFlowGraphBuilder().build(files)


def extract_flow_subgraph(graph: MuleFlowGraph, flow: str) -> MuleFlowGraph:
    """
    Restricts a graph to one flow, its direct neighbours and the edges touching it.

    Args:
        graph (MuleFlowGraph): The full graph.
        flow (str): Node id, or declared flow name (first match wins).

    Returns:
        MuleFlowGraph: The focused sub-graph, sharing node objects with `graph`.

    Raises:
        KeyError: If no node has that id or name.
    """
    focus = graph.get_node(flow)
    if focus is None:
        named = graph.find_nodes_by_name(flow)
        if not named:
            raise KeyError(f"Flow not found: {flow}")
        focus = named[0]

    edges = [edge for edge in graph.edges if focus.id in (edge.source, edge.target)]
    neighbour_ids = {focus.id}
    for edge in edges:
        neighbour_ids.add(edge.source)
        neighbour_ids.add(edge.target)
    nodes = [node for node in graph.nodes if node.id in neighbour_ids]
    return MuleFlowGraph(nodes=nodes, edges=edges)
