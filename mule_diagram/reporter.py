import logging
from typing import Any, Dict, List, Optional, Tuple

from tabulate import tabulate

from .models import UNKNOWN_FILE, FlowType, MuleFlowGraph, count_components

"""
Prints a human-readable summary of a Mule flow graph to the console.

The summary lists every flow with its type, source file and component count,
the flow references between them, and any reference that could not be
resolved to a declared flow. Tables are formatted with `tabulate`.
"""

logger = logging.getLogger(__name__)


def summarize_graph(graph: MuleFlowGraph) -> Dict[str, int]:
    """
    Counts the main elements of a graph.

    Returns:
        Dict[str, int]: Keys 'flows', 'sub_flows', 'placeholders', 'components',
        'edges', 'dangling_references' and 'files'.
    """
    placeholder_ids = {node.id for node in graph.nodes if node.type == FlowType.UNKNOWN}
    return {
        'flows': sum(1 for node in graph.nodes if node.type == FlowType.FLOW),
        'sub_flows': sum(1 for node in graph.nodes if node.type == FlowType.SUB_FLOW),
        'placeholders': len(placeholder_ids),
        'components': sum(count_components(node.components) for node in graph.nodes),
        'edges': len(graph.edges),
        'dangling_references': sum(1 for edge in graph.edges if edge.target in placeholder_ids),
        'files': len({node.file_path for node in graph.nodes if node.file_path != UNKNOWN_FILE}),
    }


def group_flows_by_file(graph: MuleFlowGraph) -> List[Tuple[str, List[str]]]:
    """Groups flow names by source file, both sorted. Placeholders are grouped under 'Unknown Source'."""
    groups: Dict[str, List[str]] = {}
    for node in graph.nodes:
        label = "Unknown Source" if node.file_path == UNKNOWN_FILE else node.file_path
        groups.setdefault(label, []).append(node.name)
    return [(file_path, sorted(names)) for file_path, names in sorted(groups.items())]


def flow_table_rows(graph: MuleFlowGraph) -> List[List[Any]]:
    return [
        [node.name, node.type.value, node.file_path, count_components(node.components)]
        for node in graph.nodes
    ]


def edge_table_rows(graph: MuleFlowGraph) -> List[List[Any]]:
    names = {node.id: node.name for node in graph.nodes}
    return [
        [names.get(edge.source, edge.source), names.get(edge.target, edge.target),
         edge.source_file, edge.target_file or UNKNOWN_FILE]
        for edge in graph.edges
    ]


def generate_console_report(graph: MuleFlowGraph, mode: Optional[str] = None) -> None:
    """
    Prints the flow graph summary to the console.

    Args:
        graph (MuleFlowGraph): The graph to summarize.
        mode (Optional[str]): The rendering mode used for the diagram, if any.
    """
    logger.info("Generating console report...")
    print("\n" + "=" * 80)
    print("MULE FLOW GRAPH")
    print("=" * 80 + "\n")

    if not graph.nodes:
        print("No flows found.")
        print("=" * 80 + "\n")
        return

    summary = summarize_graph(graph)
    if mode:
        print(f"Rendering mode: {mode}")
    print(tabulate([[key.replace('_', ' ').title(), value] for key, value in summary.items()],
                   headers=["Metric", "Count"], tablefmt="grid"))

    print("\n--- FLOWS ---")
    print(tabulate(flow_table_rows(graph), headers=["Flow", "Type", "File", "Components"], tablefmt="grid"))

    print("\n--- FLOW REFERENCES ---")
    if graph.edges:
        print(tabulate(edge_table_rows(graph), headers=["From", "To", "Source File", "Target File"], tablefmt="grid"))
    else:
        print("  No flow references found.")

    dangling = [node.name for node in graph.nodes if node.type == FlowType.UNKNOWN]
    if dangling:
        print("\n--- UNRESOLVED REFERENCES ---")
        for name in dangling:
            print(f"  - {name}")

    print("\n" + "=" * 80)
    print("END OF REPORT")
    print("=" * 80 + "\n")
