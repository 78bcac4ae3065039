"""
Static registry of Mule component tags.

Maps a normalized tag name (e.g. `http:listener`, `choice`) to the display
metadata used when building component trees and rendering diagrams: a
human-readable type, an icon and whether the element structurally encloses
other processors. Tags missing from the table get a type derived from their
namespace prefix and local name.
"""
from dataclasses import dataclass
from typing import Dict, Optional

DEFAULT_ICON = "⚙️"


@dataclass(frozen=True)
class ComponentDescriptor:
    type: str
    icon: str = DEFAULT_ICON
    is_container: bool = False
    default_label: Optional[str] = None


COMPONENT_DESCRIPTORS: Dict[str, ComponentDescriptor] = {
    # Core processors
    "logger": ComponentDescriptor("Logger", "📝"),
    "transform": ComponentDescriptor("Transform Message", "🔄"),
    "ee:transform": ComponentDescriptor("Transform Message", "🔄"),
    "set-variable": ComponentDescriptor("Set Variable", "📌"),
    "set-payload": ComponentDescriptor("Set Payload", "📦"),
    "remove-variable": ComponentDescriptor("Remove Variable", "🗑️"),
    "flow-ref": ComponentDescriptor("Flow Reference", "🔗"),
    "sub-flow-ref": ComponentDescriptor("Sub-Flow Reference", "🔗"),
    "raise-error": ComponentDescriptor("Raise Error", "❗"),
    "parse-template": ComponentDescriptor("Parse Template", "📄"),
    "idempotent-message-validator": ComponentDescriptor("Idempotent Message Validator", "🧾"),
    "scheduler": ComponentDescriptor("Scheduler", "⏰"),
    "ee:cache": ComponentDescriptor("Cache", "💾", True),

    # Scopes and routers
    "choice": ComponentDescriptor("Choice", "🔀", True),
    "when": ComponentDescriptor("When", "➡️", True),
    "otherwise": ComponentDescriptor("Otherwise", "↪️", True, "Otherwise"),
    "try": ComponentDescriptor("Try", "🛡️", True),
    "error-handler": ComponentDescriptor("Error Handler", "🚨", True),
    "on-error-continue": ComponentDescriptor("On Error Continue", "🩹", True),
    "on-error-propagate": ComponentDescriptor("On Error Propagate", "🚨", True),
    "scatter-gather": ComponentDescriptor("Scatter-Gather", "🌟", True),
    "route": ComponentDescriptor("Route", "🛤️", True),
    "foreach": ComponentDescriptor("For Each", "🔁", True),
    "parallel-foreach": ComponentDescriptor("Parallel For Each", "⚡🔁", True),
    "async": ComponentDescriptor("Async", "⚡", True),
    "until-successful": ComponentDescriptor("Until Successful", "🔄", True),
    "first-successful": ComponentDescriptor("First Successful", "🥇", True),
    "round-robin": ComponentDescriptor("Round Robin", "🔃", True),

    # HTTP
    "http:listener": ComponentDescriptor("HTTP Listener", "🌐"),
    "http:request": ComponentDescriptor("HTTP Request", "🌐"),

    # APIkit
    "apikit:router": ComponentDescriptor("APIkit Router", "🧭"),
    "apikit:console": ComponentDescriptor("APIkit Console", "🖥️"),

    # Database
    "db:select": ComponentDescriptor("DB Select", "🗄️"),
    "db:insert": ComponentDescriptor("DB Insert", "🗄️➕"),
    "db:update": ComponentDescriptor("DB Update", "🗄️✏️"),
    "db:delete": ComponentDescriptor("DB Delete", "🗄️🗑️"),
    "db:stored-procedure": ComponentDescriptor("DB Stored Procedure", "🗄️"),
    "db:bulk-insert": ComponentDescriptor("DB Bulk Insert", "🗄️➕"),

    # File / FTP / SFTP
    "file:read": ComponentDescriptor("File Read", "📁📖"),
    "file:write": ComponentDescriptor("File Write", "📁✏️"),
    "file:list": ComponentDescriptor("File List", "📁📋"),
    "file:listener": ComponentDescriptor("File Listener", "📁👂"),
    "sftp:read": ComponentDescriptor("SFTP Read", "📁📖"),
    "sftp:write": ComponentDescriptor("SFTP Write", "📁✏️"),

    # Salesforce
    "salesforce:create": ComponentDescriptor("SF Create", "☁️➕"),
    "salesforce:query": ComponentDescriptor("SF Query", "☁️🔍"),
    "salesforce:update": ComponentDescriptor("SF Update", "☁️✏️"),
    "salesforce:upsert": ComponentDescriptor("SF Upsert", "☁️🔁"),

    # Messaging
    "vm:publish": ComponentDescriptor("VM Publish", "📨"),
    "vm:consume": ComponentDescriptor("VM Consume", "📥"),
    "vm:listener": ComponentDescriptor("VM Listener", "👂"),
    "jms:publish": ComponentDescriptor("JMS Publish", "📤"),
    "jms:consume": ComponentDescriptor("JMS Consume", "📥"),
    "jms:listener": ComponentDescriptor("JMS Listener", "👂"),
    "anypoint-mq:publish": ComponentDescriptor("MQ Publish", "📤"),
    "anypoint-mq:consume": ComponentDescriptor("MQ Consume", "📥"),
    "anypoint-mq:subscriber": ComponentDescriptor("MQ Subscriber", "👂"),

    # Object store
    "os:store": ComponentDescriptor("OS Store", "💾"),
    "os:retrieve": ComponentDescriptor("OS Retrieve", "💾"),
    "os:remove": ComponentDescriptor("OS Remove", "💾"),

    # Batch
    "batch:job": ComponentDescriptor("Batch Job", "📚", True),
    "batch:process-records": ComponentDescriptor("Batch Process Records", "📚", True, "Process Records"),
    "batch:step": ComponentDescriptor("Batch Step", "🪜", True),
    "batch:aggregator": ComponentDescriptor("Batch Aggregator", "🧺", True),
    "batch:on-complete": ComponentDescriptor("Batch On Complete", "🏁", True, "On Complete"),
}

# Structural tags that enclose processors even when not listed above.
CONTAINER_TAGS = frozenset({
    "choice", "when", "otherwise",
    "try", "error-handler", "on-error-continue", "on-error-propagate",
    "scatter-gather", "route",
    "foreach", "parallel-foreach",
    "async", "until-successful", "first-successful", "round-robin",
    "poll", "scheduled",
    "batch:job", "batch:process-records", "batch:step", "batch:aggregator",
    "batch:on-complete", "batch:on-error", "batch:on-success", "batch:on-failure",
    "job", "process-records", "step", "aggregator", "on-complete",
})

# Containers whose children are alternative branches rather than a sequence.
BRANCHING_TAGS = frozenset({
    "choice", "scatter-gather", "error-handler", "first-successful", "round-robin",
})

NAMESPACE_PREFIX_LABELS: Dict[str, str] = {
    "http": "HTTP",
    "db": "DB",
    "vm": "VM",
    "jms": "JMS",
    "os": "OS",
    "batch": "Batch",
    "salesforce": "Salesforce",
    "anypoint-mq": "MQ",
    "ee": "",
}


def normalize_tag_name(raw: Optional[str]) -> str:
    if not raw:
        return ""
    return raw.strip().lower()


def split_tag_name(tag_name: str):
    """Returns (prefix, local_name); prefix is empty for unprefixed tags."""
    if ":" in tag_name:
        prefix, local_name = tag_name.rsplit(":", 1)
        return prefix, local_name
    return "", tag_name


def _title_words(text: str) -> str:
    return " ".join(word.capitalize() for word in text.replace("_", "-").split("-") if word)


def format_namespace_prefix(prefix: str) -> str:
    """
    Formats a namespace prefix for display in a derived component type.

    Known prefixes use their fixed abbreviation (`http` -> `HTTP`, `ee` -> nothing).
    Unknown prefixes of up to three characters are upper-cased, longer ones title-cased.
    """
    if prefix in NAMESPACE_PREFIX_LABELS:
        return NAMESPACE_PREFIX_LABELS[prefix]
    if len(prefix) <= 3:
        return prefix.upper()
    return _title_words(prefix)


def derive_component_type(tag_name: str) -> str:
    """Derives a display type for a tag missing from COMPONENT_DESCRIPTORS."""
    prefix, local_name = split_tag_name(tag_name)
    local_label = _title_words(local_name)
    prefix_label = format_namespace_prefix(prefix) if prefix else ""
    if prefix_label:
        return f"{prefix_label} {local_label}".strip()
    return local_label


def is_container_tag(tag_name: str) -> bool:
    _, local_name = split_tag_name(tag_name)
    return tag_name in CONTAINER_TAGS or local_name in CONTAINER_TAGS


def is_branching_tag(tag_name: str) -> bool:
    _, local_name = split_tag_name(tag_name)
    return tag_name in BRANCHING_TAGS or local_name in BRANCHING_TAGS


def resolve_descriptor(tag_name: str) -> ComponentDescriptor:
    """
    Resolves the descriptor of a component tag.

    Lookup order:
    1. Exact match on the fully-qualified tag (e.g. `http:listener`).
    2. Match on the local name after the prefix (e.g. `ee:transform` -> `transform`).
    3. A derived descriptor: type from `derive_component_type`, the default icon,
       and container status from `CONTAINER_TAGS`.

    Args:
        tag_name (str): The tag name; it is normalized before lookup.

    Returns:
        ComponentDescriptor: The resolved descriptor. Never None.
    """
    normalized = normalize_tag_name(tag_name)
    descriptor = COMPONENT_DESCRIPTORS.get(normalized)
    if descriptor is not None:
        return descriptor

    _, local_name = split_tag_name(normalized)
    descriptor = COMPONENT_DESCRIPTORS.get(local_name)
    if descriptor is not None:
        return descriptor

    return ComponentDescriptor(
        type=derive_component_type(normalized) or "Unknown Component",
        icon=DEFAULT_ICON,
        is_container=is_container_tag(normalized),
    )
