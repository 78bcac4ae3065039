"""
Renders a MuleFlowGraph as a Mermaid flowchart definition.

Three concrete rendering modes trade detail for size:

- simplified: one box per flow, labelled with its type and component count.
- detailed: each flow is a subgraph showing its first top-level components as
  a chain, with a "+K more" node when some are left out.
- full-detailed: every component and all of its nested children.

The auto mode estimates the size of the diagram and picks simplified or
detailed, so large applications stay within what Mermaid renders comfortably.
Flow-to-flow reference edges are drawn the same way in every mode.
"""
import logging
from enum import Enum
from typing import List, Optional, Tuple, Union

from .component_registry import is_branching_tag
from .models import FlowNode, FlowType, MuleComponent, MuleFlowGraph, count_components
from .sanitizer import escape_label, sanitize_id
from .settings import DEFAULT_SETTINGS, DiagramSettings

logger = logging.getLogger(__name__)

NODE_SIZE_WEIGHT = 100
COMPONENT_SIZE_WEIGHT = 50
EDGE_SIZE_WEIGHT = 30

UNKNOWN_FLOW_LABEL = "Unknown Flow"
UNKNOWN_COMPONENT_LABEL = "Unknown Component"
UNKNOWN_TYPE_LABEL = "Unknown Type"
EMPTY_GRAPH_NODE = 'empty__graph["No flows found"]'

FLOW_ICONS = {
    FlowType.FLOW: "⚡",
    FlowType.SUB_FLOW: "🔗",
    FlowType.UNKNOWN: "❓",
}

CLASS_DEFINITIONS = [
    'classDef flow fill:#4f46e5,stroke:#312e81,stroke-width:2px,color:#ffffff,font-weight:bold;',
    'classDef subflow fill:#f59e0b,stroke:#92400e,stroke-width:2px,color:#ffffff,font-weight:bold;',
    'classDef unknown fill:#6b7280,stroke:#374151,stroke-width:2px,color:#ffffff,stroke-dasharray:5 5;',
    'classDef apiflow fill:#10b981,stroke:#047857,stroke-width:2px,color:#ffffff,font-weight:bold;',
    'classDef errorflow fill:#ef4444,stroke:#b91c1c,stroke-width:2px,color:#ffffff,font-weight:bold;',
    'classDef component fill:#e5e7eb,stroke:#6b7280,stroke-width:1px,color:#374151,font-size:11px;',
    'classDef httpComponent fill:#3b82f6,stroke:#1e40af,stroke-width:1px,color:#ffffff,font-size:11px;',
    'classDef dbComponent fill:#10b981,stroke:#047857,stroke-width:1px,color:#ffffff,font-size:11px;',
    'classDef transformComponent fill:#f59e0b,stroke:#92400e,stroke-width:1px,color:#ffffff,font-size:11px;',
    'classDef errorComponent fill:#ef4444,stroke:#b91c1c,stroke-width:1px,color:#ffffff,font-size:11px;',
    'classDef moreComponent fill:#ffffff,stroke:#9ca3af,stroke-width:1px,color:#6b7280,font-size:11px,stroke-dasharray:3 3;',
]


class RenderMode(str, Enum):
    AUTO = "auto"
    SIMPLIFIED = "simplified"
    DETAILED = "detailed"
    FULL_DETAILED = "full-detailed"


Shape = Tuple[str, str]

RECTANGLE: Shape = ("[", "]")
ROUNDED: Shape = ("(", ")")
STADIUM: Shape = ("([", "])")
SUBROUTINE: Shape = ("[[", "]]")
DIAMOND: Shape = ("{", "}")


def estimate_diagram_size(graph: MuleFlowGraph) -> int:
    """Size score: 100 per flow node, 50 per component (nested ones included), 30 per edge."""
    total_components = sum(count_components(node.components) for node in graph.nodes)
    return (NODE_SIZE_WEIGHT * len(graph.nodes)
            + COMPONENT_SIZE_WEIGHT * total_components
            + EDGE_SIZE_WEIGHT * len(graph.edges))


def select_render_mode(graph: MuleFlowGraph, settings: Optional[DiagramSettings] = None) -> RenderMode:
    """
    Picks the concrete mode used by RenderMode.AUTO.

    Returns SIMPLIFIED when the size score exceeds `settings.size_score_threshold`
    or the node count exceeds `settings.max_nodes_for_detailed`, DETAILED otherwise.
    """
    settings = settings or DEFAULT_SETTINGS
    score = estimate_diagram_size(graph)
    if score > settings.size_score_threshold or len(graph.nodes) > settings.max_nodes_for_detailed:
        logger.info(f"Diagram size score {score} with {len(graph.nodes)} flows; using simplified rendering.")
        return RenderMode.SIMPLIFIED
    logger.debug(f"Diagram size score {score} with {len(graph.nodes)} flows; using detailed rendering.")
    return RenderMode.DETAILED


def get_flow_shape(node: FlowNode) -> Shape:
    name = (node.name or "").lower()
    if "api" in name:
        return STADIUM
    if "error" in name:
        return DIAMOND
    if node.type == FlowType.SUB_FLOW:
        return SUBROUTINE
    return RECTANGLE


def get_flow_class_name(node: FlowNode) -> str:
    name = (node.name or "").lower()
    if "api" in name:
        return "apiflow"
    if "error" in name:
        return "errorflow"
    if node.type == FlowType.SUB_FLOW:
        return "subflow"
    if node.type == FlowType.FLOW:
        return "flow"
    return "unknown"


def get_component_shape(component: MuleComponent) -> Shape:
    component_type = (component.type or "").lower()
    if "choice" in component_type or "error" in component_type:
        return DIAMOND
    if "transform" in component_type or "logger" in component_type:
        return ROUNDED
    if "http" in component_type or "db" in component_type or "file" in component_type:
        return SUBROUTINE
    if "async" in component_type or "scatter" in component_type:
        return STADIUM
    return RECTANGLE


def get_component_class_name(component: MuleComponent) -> str:
    component_type = (component.type or "").lower()
    if "http" in component_type:
        return "httpComponent"
    if "db" in component_type or "database" in component_type:
        return "dbComponent"
    if "transform" in component_type:
        return "transformComponent"
    if "error" in component_type or "choice" in component_type:
        return "errorComponent"
    return "component"


def mermaid_id(node_id: str) -> str:
    """Node ids as written to the diagram. Ids from the graph builder pass through unchanged."""
    return sanitize_id(node_id)


def component_node_id(node: FlowNode, component: MuleComponent) -> str:
    # Sanitized flow ids never contain "__", so derived ids cannot collide with them.
    return f"{mermaid_id(node.id)}__{sanitize_id(component.id, fallback='comp')}"


def _edge_arrow(graph: MuleFlowGraph, source_id: str, target_id: str, source_file: str, target_file: Optional[str]) -> str:
    source = graph.get_node(source_id)
    target = graph.get_node(target_id)
    if source is not None and target is not None and source.type == FlowType.FLOW and target.type == FlowType.SUB_FLOW:
        return "-.->"
    if source_file != target_file:
        return "==>"
    return "-->"


class MermaidWriter:
    """Accumulates the lines of one Mermaid definition for a concrete mode."""

    def __init__(self, graph: MuleFlowGraph, settings: DiagramSettings) -> None:
        self.graph = graph
        self.settings = settings
        self.lines: List[str] = []
        self.class_assignments: List[Tuple[str, str]] = []

    def label(self, text: Optional[str], fallback: str) -> str:
        return escape_label(text, fallback=fallback, max_length=self.settings.max_label_length)

    def declare(self, node_id: str, shape: Shape, label: str, class_name: str, indent: str = "    ") -> None:
        self.lines.append(f'{indent}{node_id}{shape[0]}"{label}"{shape[1]}')
        self.class_assignments.append((node_id, class_name))

    def link(self, source_id: str, target_id: str, arrow: str = "-->", indent: str = "    ") -> None:
        self.lines.append(f"{indent}{source_id} {arrow} {target_id}")

    def flow_label(self, node: FlowNode, with_summary: bool) -> str:
        icon = FLOW_ICONS.get(node.type, FLOW_ICONS[FlowType.UNKNOWN])
        name = self.label(node.name, UNKNOWN_FLOW_LABEL)
        if not with_summary:
            return f"{icon} {name}"
        type_text = node.type.value if isinstance(node.type, FlowType) else self.label(node.type, UNKNOWN_TYPE_LABEL)
        total = count_components(node.components)
        noun = "component" if total == 1 else "components"
        return f"{icon} {name}<br/>{type_text} • {total} {noun}"

    def component_label(self, component: MuleComponent) -> str:
        name = self.label(component.name, UNKNOWN_COMPONENT_LABEL)
        label = f"{component.icon or '⚙️'} {name}"
        if component.config_ref:
            label += f" ({self.label(component.config_ref, '')})"
        return label

    def declare_flow(self, node: FlowNode, with_summary: bool, indent: str = "    ") -> None:
        self.declare(mermaid_id(node.id), get_flow_shape(node), self.flow_label(node, with_summary), get_flow_class_name(node), indent)

    def declare_component(self, node: FlowNode, component: MuleComponent, indent: str) -> str:
        component_id = component_node_id(node, component)
        self.declare(component_id, get_component_shape(component), self.component_label(component),
                     get_component_class_name(component), indent)
        return component_id

    def open_flow_subgraph(self, node: FlowNode) -> None:
        self.lines.append(f'    subgraph sg__{mermaid_id(node.id)}["{self.label(node.name, UNKNOWN_FLOW_LABEL)}"]')

    def close_subgraph(self) -> None:
        self.lines.append("    end")

    def render_simplified(self) -> None:
        for node in self.graph.nodes:
            self.declare_flow(node, with_summary=True)

    def render_detailed(self) -> None:
        limit = self.settings.detailed_component_limit
        for node in self.graph.nodes:
            components = node.components or []
            if not components:
                self.declare_flow(node, with_summary=False)
                continue

            self.open_flow_subgraph(node)
            self.declare_flow(node, with_summary=False, indent="        ")
            previous_id = mermaid_id(node.id)
            for component in components[:limit]:
                component_id = self.declare_component(node, component, "        ")
                self.link(previous_id, component_id, indent="        ")
                previous_id = component_id

            hidden = len(components) - limit
            if hidden > 0:
                more_id = f"{mermaid_id(node.id)}__more"
                self.declare(more_id, RECTANGLE, f"+{hidden} more", "moreComponent", "        ")
                self.link(previous_id, more_id, indent="        ")
            self.close_subgraph()

    def render_component_tree(self, node: FlowNode, components: List[MuleComponent], parent_id: str, branching: bool) -> None:
        previous_id = parent_id
        for component in components:
            component_id = self.declare_component(node, component, "        ")
            self.link(parent_id if branching else previous_id, component_id, indent="        ")
            previous_id = component_id
            if component.children:
                self.render_component_tree(node, component.children, component_id,
                                           is_branching_tag(component.tag_name or ""))

    def render_full_detailed(self) -> None:
        for node in self.graph.nodes:
            if not node.components:
                self.declare_flow(node, with_summary=False)
                continue
            self.open_flow_subgraph(node)
            self.declare_flow(node, with_summary=False, indent="        ")
            self.render_component_tree(node, node.components, mermaid_id(node.id), branching=False)
            self.close_subgraph()

    def render_edges(self) -> None:
        for edge in self.graph.edges:
            arrow = _edge_arrow(self.graph, edge.source, edge.target, edge.source_file, edge.target_file)
            self.link(mermaid_id(edge.source), mermaid_id(edge.target), arrow)

    def finish(self, mode: RenderMode) -> str:
        header = [f"graph {self.settings.direction}", f"    %% Rendering mode: {mode.value}"]
        if not self.graph.nodes:
            return "\n".join(header + [f"    {EMPTY_GRAPH_NODE}"])
        styles = [f"    {definition}" for definition in CLASS_DEFINITIONS]
        assignments = [f"    class {node_id} {class_name};" for node_id, class_name in self.class_assignments]
        return "\n".join(header + self.lines + styles + assignments)


def render_mermaid(
    graph: MuleFlowGraph,
    mode: Union[RenderMode, str] = RenderMode.AUTO,
    settings: Optional[DiagramSettings] = None,
) -> str:
    """
    Renders the graph as Mermaid flowchart text.

    Node ids are passed through `sanitize_id`, so hand-built graphs with
    arbitrary ids still produce valid Mermaid.

    Args:
        graph (MuleFlowGraph): The flow graph.
        mode (Union[RenderMode, str]): A RenderMode or its value ("auto",
            "simplified", "detailed", "full-detailed").
        settings (Optional[DiagramSettings]): Thresholds, limits and direction.
            Defaults to DEFAULT_SETTINGS.

    Returns:
        str: The Mermaid definition: header, node declarations, edges, class
        definitions and per-node class assignments.

    Raises:
        ValueError: If `mode` is not a known rendering mode.
    """
    settings = settings or DEFAULT_SETTINGS
    mode = RenderMode(mode)

    if mode == RenderMode.AUTO:
        return render_mermaid(graph, select_render_mode(graph, settings), settings)

    writer = MermaidWriter(graph, settings)
    if mode == RenderMode.SIMPLIFIED:
        writer.render_simplified()
    elif mode == RenderMode.DETAILED:
        writer.render_detailed()
    elif mode == RenderMode.FULL_DETAILED:
        writer.render_full_detailed()
    writer.render_edges()

    definition = writer.finish(mode)
    logger.info(f"Generated {mode.value} Mermaid definition with {len(definition.splitlines())} lines")
    return definition
