"""
Data model for Mule flow graphs.

A graph is built from the flows and sub-flows declared in the Mule XML
configuration files of an application. Each flow owns an ordered tree of
components (processors), and flow references between flows become directed
edges. The graph is the only artifact handed to the diagram renderer.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

UNKNOWN_FILE = "unknown"


class FlowType(str, Enum):
    """Kind of a flow node. Placeholders created for dangling references are UNKNOWN."""
    FLOW = "flow"
    SUB_FLOW = "sub-flow"
    UNKNOWN = "unknown"


@dataclass
class MuleComponent:
    """
    One processor found inside a flow body.

    `children` is a list only for container components (choice, try,
    scatter-gather, ...). Leaf components keep it as None.
    """
    id: str
    name: str
    type: str
    tag_name: str
    icon: str = "⚙️"
    config_ref: Optional[str] = None
    doc: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    depth: int = 0
    position: int = 0
    children: Optional[List["MuleComponent"]] = None

    @property
    def is_container(self) -> bool:
        return self.children is not None


@dataclass
class FlowNode:
    id: str
    name: str
    file_path: str
    type: FlowType
    components: List[MuleComponent] = field(default_factory=list)

    @property
    def is_placeholder(self) -> bool:
        return self.type == FlowType.UNKNOWN


@dataclass
class FlowEdge:
    """A flow-ref from one flow node to another, by node id."""
    source: str
    target: str
    source_file: str
    target_file: Optional[str] = None


@dataclass
class MuleFlowGraph:
    nodes: List[FlowNode] = field(default_factory=list)
    edges: List[FlowEdge] = field(default_factory=list)

    def get_node(self, node_id: str) -> Optional[FlowNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def find_nodes_by_name(self, name: str) -> List[FlowNode]:
        return [node for node in self.nodes if node.name == name]


def count_components(components: Optional[List[MuleComponent]]) -> int:
    """
    Counts components recursively, including every nested child.

    Args:
        components (Optional[List[MuleComponent]]): Top-level components of a flow
            (or the children of a container). None counts as zero.

    Returns:
        int: The total number of components in the tree.
    """
    if not components:
        return 0
    total = 0
    for component in components:
        total += 1
        total += count_components(component.children)
    return total
