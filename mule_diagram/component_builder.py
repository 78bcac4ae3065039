"""
Builds the component tree of a single flow body.

The builder consumes the tag events produced by `tag_scanner` and keeps an
explicit stack of the container components (choice, try, foreach, ...) that
are currently open. Each new component is attached to the innermost open
container, or to the flow's root sequence when none is open.

Markup nested inside a leaf component (for example the `ee:message` of a
Transform Message or the `http:response` of an HTTP Listener) is component
configuration, not processors, and is skipped.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .component_registry import ComponentDescriptor, normalize_tag_name, resolve_descriptor
from .models import MuleComponent
from .tag_scanner import TagEvent, TagEventKind, scan_tags

logger = logging.getLogger(__name__)

MAX_SYNTHESIZED_TEXT = 40

# Attributes tried, in order, when no type-specific name can be synthesized.
GENERIC_NAME_ATTRIBUTES = ("path", "url", "queueName", "destination", "key")


def _shorten(text: str, limit: int = MAX_SYNTHESIZED_TEXT) -> str:
    text = " ".join(text.split())
    if len(text) > limit:
        return text[:limit - 3] + "..."
    return text


def synthesize_component_name(
    tag_name: str,
    descriptor: ComponentDescriptor,
    attributes: Dict[str, str],
    index: int,
) -> str:
    """
    Chooses the display name of a component.

    Order of preference:
    1. The `doc:name` attribute, then `name`.
    2. A type-specific synthesis, e.g. "GET /orders" for an HTTP listener,
       "Log: <message>" for a logger, "Set <variableName>" for set-variable.
    3. The first present attribute among GENERIC_NAME_ATTRIBUTES.
    4. The descriptor's default label.
    5. "<Type> <index>".

    Args:
        tag_name (str): Normalized tag name.
        descriptor (ComponentDescriptor): The resolved descriptor of the tag.
        attributes (Dict[str, str]): Raw attributes of the element.
        index (int): The component's sequential number within the flow body.

    Returns:
        str: A non-empty display name.
    """
    for key in ("doc:name", "name"):
        value = (attributes.get(key) or "").strip()
        if value:
            return value

    local_name = tag_name.rsplit(":", 1)[-1]

    if tag_name == "http:listener":
        path = attributes.get("path")
        if path:
            methods = attributes.get("allowedMethods") or "ANY"
            return f"{methods} {path}"
    elif tag_name == "http:request":
        target = attributes.get("path") or attributes.get("url")
        if target:
            method = attributes.get("method") or "GET"
            return f"{method} {target}"
    elif local_name == "logger":
        text = attributes.get("message") or attributes.get("category")
        if text:
            return f"Log: {_shorten(text)}"
    elif local_name in ("set-variable", "remove-variable"):
        variable = attributes.get("variableName")
        if variable:
            verb = "Set" if local_name == "set-variable" else "Remove"
            return f"{verb} {variable}"
    elif local_name == "set-payload":
        value = attributes.get("value")
        if value:
            return f"Set Payload: {_shorten(value)}"
    elif local_name == "when":
        expression = attributes.get("expression")
        if expression:
            return f"When {_shorten(expression)}"

    for key in GENERIC_NAME_ATTRIBUTES:
        value = (attributes.get(key) or "").strip()
        if value:
            return value

    if descriptor.default_label:
        return descriptor.default_label
    return f"{descriptor.type} {index}"


class ComponentTreeBuilder:
    """
    Turns the tag events of one flow body into an ordered forest of components.

    A builder is meant for a single flow body; its counter and stack are not reset.
    """

    def __init__(self) -> None:
        self.roots: List[MuleComponent] = []
        self._stack: List[Tuple[str, MuleComponent]] = []
        self._counter = 0
        # Leaf element whose inner markup is being skipped, and its nesting level.
        self._skip_tag: Optional[str] = None
        self._skip_depth = 0

    def build(self, events: Iterable[TagEvent]) -> List[MuleComponent]:
        for event in events:
            if self._skip_tag is not None:
                self._consume_skipped(event)
            elif event.kind == TagEventKind.CLOSE:
                self._close(event.name)
            else:
                self._open(event)
        return self.roots

    def _consume_skipped(self, event: TagEvent) -> None:
        if event.name != self._skip_tag:
            if event.kind == TagEventKind.CLOSE and any(open_tag == event.name for open_tag, _ in self._stack):
                # The leaf was never closed; its enclosing container is closing.
                logger.debug(f"Unclosed <{self._skip_tag}> ended by </{event.name}>")
                self._skip_tag = None
                self._close(event.name)
            return
        if event.kind == TagEventKind.OPEN:
            self._skip_depth += 1
        elif event.kind == TagEventKind.CLOSE:
            self._skip_depth -= 1
            if self._skip_depth == 0:
                self._skip_tag = None

    def _open(self, event: TagEvent) -> None:
        tag_name = normalize_tag_name(event.name)
        if not tag_name:
            return

        descriptor = resolve_descriptor(tag_name)
        self._counter += 1
        attributes = dict(event.attributes)
        siblings = self._stack[-1][1].children if self._stack else self.roots

        component = MuleComponent(
            id=f"comp_{self._counter}",
            name=synthesize_component_name(tag_name, descriptor, attributes, self._counter),
            type=descriptor.type,
            tag_name=tag_name,
            icon=descriptor.icon,
            config_ref=attributes.get("config-ref") or attributes.get("config"),
            doc=attributes.get("doc:description") or attributes.get("doc"),
            attributes=attributes,
            depth=len(self._stack),
            position=len(siblings),
            children=[] if descriptor.is_container else None,
        )
        siblings.append(component)

        if event.self_closing:
            return
        if descriptor.is_container:
            self._stack.append((tag_name, component))
        else:
            self._skip_tag = tag_name
            self._skip_depth = 1

    def _close(self, name: str) -> None:
        tag_name = normalize_tag_name(name)
        if not any(open_tag == tag_name for open_tag, _ in self._stack):
            logger.debug(f"Ignoring unmatched closing tag </{tag_name}>")
            return
        while self._stack:
            open_tag, _ = self._stack.pop()
            if open_tag == tag_name:
                return


def build_component_tree(events: Iterable[TagEvent]) -> List[MuleComponent]:
    """Builds the component forest of one flow body from its tag events."""
    return ComponentTreeBuilder().build(events)


def extract_components_from_flow_body(body: Optional[str]) -> List[MuleComponent]:
    """
    Scans a flow body and returns its top-level components with nested children.

    Args:
        body (Optional[str]): The markup between a flow's opening and closing tags.

    Returns:
        List[MuleComponent]: The component forest; empty for empty input.
    """
    if not body:
        return []
    return build_component_tree(scan_tags(body))
