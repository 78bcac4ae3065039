"""
Mule flow diagram generator.

Builds a graph of the flows, sub-flows and components declared in Mule XML
configuration files and renders it as a Mermaid flowchart.
"""
from .graph_builder import build_mule_flow_graph, extract_flow_subgraph
from .mermaid_renderer import RenderMode, render_mermaid
from .project_loader import select_relevant_xml_entries

__all__ = [
    "build_mule_flow_graph",
    "extract_flow_subgraph",
    "render_mermaid",
    "RenderMode",
    "select_relevant_xml_entries",
]
