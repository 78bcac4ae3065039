"""
Extracts flow and sub-flow definitions from Mule XML configuration text.

Each definition is delimited by its opening tag and the next matching closing
tag found by plain text search (or the end of the file when the closing tag is
missing). The body in between is handed to the component tree builder, and
scanned for `flow-ref` / `sub-flow-ref` elements naming other flows.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .component_builder import extract_components_from_flow_body
from .models import FlowType, MuleComponent
from .tag_scanner import TagEventKind, TagScanner, find_tag_end, parse_attributes

logger = logging.getLogger(__name__)

# `<flow` or `<sub-flow` followed by whitespace, `/` or `>` (so `<flow-ref` never matches).
FLOW_OPEN_TAG = re.compile(r"<(flow|sub-flow)(?=[\s/>])", re.IGNORECASE)

FLOW_REFERENCE_TAGS = frozenset({"flow-ref", "sub-flow-ref"})


@dataclass
class FlowDefinition:
    name: str
    type: FlowType
    file_path: str
    body: str
    components: List[MuleComponent] = field(default_factory=list)


def _extract_components_safely(body: str, name: str, file_path: str) -> List[MuleComponent]:
    try:
        return extract_components_from_flow_body(body)
    except Exception as e:
        logger.error(f"Failed to extract components of flow '{name}' in {file_path}: {e}")
        return []


def extract_flow_definitions(content: Optional[str], file_path: str) -> List[FlowDefinition]:
    """
    Finds all flow and sub-flow definitions of one configuration file, in document order.

    Definitions without a `name` attribute are skipped. A self-closing
    definition (`<flow name="x"/>`) has an empty body. Scanning resumes after
    each consumed closing tag, so text inside a flow is never matched again.

    Args:
        content (Optional[str]): The raw XML text of the file.
        file_path (str): The file's path, recorded on every definition.

    Returns:
        List[FlowDefinition]: The definitions with their component trees.
    """
    definitions: List[FlowDefinition] = []
    if not content:
        return definitions

    position = 0
    while True:
        match = FLOW_OPEN_TAG.search(content, position)
        if match is None:
            break

        written_tag = match.group(1)
        tag_type = written_tag.lower()
        tag_end = find_tag_end(content, match.end())
        if tag_end == -1:
            logger.warning(f"Unterminated <{tag_type}> tag in {file_path}; ignoring the rest of the file.")
            break

        open_tag_text = content[match.end():tag_end]
        self_closing = open_tag_text.rstrip().endswith("/")
        attributes = parse_attributes(open_tag_text.rstrip().rstrip("/"))
        name = (attributes.get("name") or "").strip()
        open_tag_end = tag_end + 1

        if self_closing:
            body = ""
            position = open_tag_end
        else:
            closing_tag = f"</{written_tag}>"
            close_index = content.find(closing_tag, open_tag_end)
            if close_index == -1:
                body = content[open_tag_end:]
                position = len(content)
            else:
                body = content[open_tag_end:close_index]
                position = close_index + len(closing_tag)

        if not name:
            logger.debug(f"Skipping <{tag_type}> without a name in {file_path}")
            continue

        flow_type = FlowType.SUB_FLOW if tag_type == "sub-flow" else FlowType.FLOW
        components = _extract_components_safely(body, name, file_path)
        logger.debug(f"Extracted {flow_type.value} '{name}' from {file_path} with {len(components)} top-level components")
        definitions.append(FlowDefinition(
            name=name,
            type=flow_type,
            file_path=file_path,
            body=body,
            components=components,
        ))

    return definitions


def extract_referenced_flows(body: Optional[str]) -> List[str]:
    """
    Lists the flow names referenced by `flow-ref` / `sub-flow-ref` elements of a body.

    References inside comments or CDATA sections are ignored. Duplicates are
    kept: every reference becomes its own edge.

    Args:
        body (Optional[str]): A flow body.

    Returns:
        List[str]: Referenced names in document order.
    """
    references: List[str] = []
    if not body:
        return references
    for event in TagScanner(body):
        if event.kind == TagEventKind.CLOSE or event.name not in FLOW_REFERENCE_TAGS:
            continue
        target = (event.attributes.get("name") or "").strip()
        if target:
            references.append(target)
    return references
