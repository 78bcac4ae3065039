"""
Main entry point for the Mule flow diagram CLI.

Reads the Mule XML configuration files of a project directory or deployable
archive, builds the flow graph and writes it as a Mermaid definition. It can
also print a console summary and write a standalone HTML page embedding the
diagram.
"""
import argparse
import logging
import sys
import zipfile
from typing import List, Optional

from .graph_builder import build_mule_flow_graph, extract_flow_subgraph
from .html_reporter import generate_html_report, load_default_template
from .mermaid_renderer import RenderMode, render_mermaid, select_render_mode
from .project_loader import collect_xml_files, read_artifact_name
from .reporter import generate_console_report
from .settings import load_settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Generate a Mermaid flow diagram from the XML configuration of a Mule application.'
    )
    parser.add_argument(
        'source',
        type=str,
        help='Path to a Mule project directory or a deployable .jar/.zip archive.'
    )
    parser.add_argument(
        '--mode',
        choices=[mode.value for mode in RenderMode],
        default=RenderMode.AUTO.value,
        help='Rendering mode. "auto" picks detailed or simplified by diagram size. Default: auto'
    )
    parser.add_argument(
        '--flow',
        type=str,
        default=None,
        help='Optional. Render only this flow (by name or id) with its direct neighbours.'
    )
    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Optional. Path of the Mermaid (.mmd) file to write. Printed to stdout when omitted.'
    )
    parser.add_argument(
        '--html-report',
        type=str,
        default=None,
        help='Optional. Path of a standalone HTML page embedding the diagram.'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Optional. YAML file overriding diagram settings (thresholds, limits, direction).'
    )
    parser.add_argument('--summary', action='store_true', help='Print a tabular summary of the flow graph.')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging.')
    return parser


def write_text(path: str, content: str) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        f.write(content)
    logger.info(f"Wrote {path}")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Parses command-line arguments and generates the diagram.

    Steps:
    1. Configure logging (stderr, DEBUG with --verbose).
    2. Load diagram settings from --config, if given.
    3. Collect the XML files of the source and build the flow graph.
    4. Restrict the graph to --flow, if given.
    5. Render the Mermaid definition and write it to --output or stdout.
    6. Optionally print the console summary and write the HTML report.

    Exits with status 1 when the source cannot be read, contains no XML files,
    the settings are invalid, or --flow names an unknown flow.
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    try:
        settings = load_settings(args.config)
    except ValueError as e:
        logger.error(f"Invalid diagram settings: {e}")
        sys.exit(1)

    logger.info(f"Generating flow diagram for: {args.source}")
    try:
        files = collect_xml_files(args.source)
    except FileNotFoundError as e:
        logger.error(str(e))
        sys.exit(1)
    except zipfile.BadZipFile as e:
        logger.error(f"Cannot read archive {args.source}: {e}")
        sys.exit(1)

    if not files:
        logger.error(f"No Mule XML files found in {args.source}")
        sys.exit(1)

    graph = build_mule_flow_graph(files)

    if args.flow:
        try:
            graph = extract_flow_subgraph(graph, args.flow)
        except KeyError:
            logger.error(f"Flow not found: {args.flow}")
            sys.exit(1)

    mode = RenderMode(args.mode)
    effective_mode = select_render_mode(graph, settings) if mode == RenderMode.AUTO else mode
    mermaid_definition = render_mermaid(graph, effective_mode, settings)

    if args.output:
        write_text(args.output, mermaid_definition)
    else:
        print(mermaid_definition)

    if args.summary:
        generate_console_report(graph, effective_mode.value)

    if args.html_report:
        metadata = {
            'artifact_name': read_artifact_name(args.source),
            'mode': effective_mode.value,
        }
        report_content = generate_html_report(graph, mermaid_definition, load_default_template(), metadata)
        write_text(args.html_report, report_content)


if __name__ == '__main__':
    main()
