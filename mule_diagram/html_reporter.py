"""
Generates a standalone HTML page for a Mule flow diagram.

The page embeds the Mermaid definition (rendered client-side by mermaid.js),
a summary table, the flows grouped by file and a per-flow table. Placeholders
of the form `{{name}}` in a template string are replaced with formatted data;
tables are produced with `tabulate`.
"""
import datetime
import html
import os
from typing import Any, Dict, Optional

from tabulate import tabulate

from .models import MuleFlowGraph
from .reporter import flow_table_rows, group_flows_by_file, summarize_graph

DEFAULT_TEMPLATE_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "report_template.html")
DEFAULT_TITLE = "Mule Application Flow Diagram"


def load_default_template() -> str:
    """Reads the HTML template shipped with the package."""
    with open(DEFAULT_TEMPLATE_PATH, 'r', encoding='utf-8') as f:
        return f.read()


def _format_flows_by_file(graph: MuleFlowGraph) -> str:
    groups = group_flows_by_file(graph)
    if not groups:
        return "<p>No flows found.</p>"
    items = "".join(
        f"<li><strong>{html.escape(file_path)}</strong>: {html.escape(', '.join(names))}</li>"
        for file_path, names in groups
    )
    return f"<ul>{items}</ul>"


def generate_html_report(
    graph: MuleFlowGraph,
    mermaid_definition: str,
    template_string: str,
    metadata: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Populates an HTML template with a flow diagram and its summary.

    Placeholders replaced in `template_string`:
    - `{{title}}`: "<artifact name> Flow Diagram", or a default title.
    - `{{mode}}`: the rendering mode from `metadata['mode']`.
    - `{{generated_at}}`: current time, `%Y-%m-%d %H:%M:%S`.
    - `{{summary_table}}`, `{{flow_table}}`: HTML tables.
    - `{{flows_by_file}}`: an unordered list of flows per file.
    - `{{mermaid_definition}}`: the HTML-escaped Mermaid text.

    Args:
        graph (MuleFlowGraph): The rendered graph.
        mermaid_definition (str): The Mermaid text produced by the renderer.
        template_string (str): The HTML template.
        metadata (Optional[Dict[str, Any]]): Optional 'artifact_name' and 'mode'.

    Returns:
        str: The populated HTML content.
    """
    metadata = metadata or {}
    artifact_name = metadata.get('artifact_name')
    title = f"{artifact_name} Flow Diagram" if artifact_name else DEFAULT_TITLE

    html_content = template_string
    html_content = html_content.replace('{{title}}', html.escape(title))
    html_content = html_content.replace('{{mode}}', html.escape(str(metadata.get('mode', 'auto'))))
    html_content = html_content.replace('{{generated_at}}', datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S'))

    summary = summarize_graph(graph)
    summary_rows = [[key.replace('_', ' ').title(), value] for key, value in summary.items()]
    html_content = html_content.replace('{{summary_table}}', tabulate(summary_rows, headers=["Metric", "Count"], tablefmt='html'))

    rows = flow_table_rows(graph)
    if rows:
        flow_table = tabulate(rows, headers=["Flow", "Type", "File", "Components"], tablefmt='html')
    else:
        flow_table = "<p>No flows found.</p>"
    html_content = html_content.replace('{{flow_table}}', flow_table)
    html_content = html_content.replace('{{flows_by_file}}', _format_flows_by_file(graph))

    # mermaid.js renders the element's decoded text content.
    html_content = html_content.replace('{{mermaid_definition}}', html.escape(mermaid_definition, quote=False))
    return html_content
