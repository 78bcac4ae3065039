"""
Identifier and label sanitization for Mermaid output.

Flow names are authored freely in Mule configuration files and may contain
quotes, brackets, colons, slashes or even Mermaid keywords. Node identifiers
derived from them must be letter-leading, contain only `[A-Za-z0-9_]`, avoid
reserved words and stay reasonably short. Labels are quoted in the diagram
text, so characters that break Mermaid's label parsing are replaced.
"""
import hashlib
import re
from typing import Optional

MAX_ID_LENGTH = 50
HASH_SUFFIX_LENGTH = 8
DEFAULT_MAX_LABEL_LENGTH = 40

# Compared case-insensitively.
MERMAID_RESERVED_WORDS = frozenset({
    "end", "graph", "subgraph", "flowchart", "class", "classdef", "click",
    "style", "linkstyle", "default", "direction", "call", "href",
    "td", "tb", "bt", "rl", "lr",
})

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_]")
_REPEATED_UNDERSCORES = re.compile(r"_{2,}")
_WHITESPACE = re.compile(r"\s+")

LABEL_REPLACEMENTS = {
    '"': "'",
    "`": "'",
    "[": "(",
    "]": ")",
    "{": "(",
    "}": ")",
    "<": "‹",
    ">": "›",
    "|": "/",
    "#": "",
    ";": ",",
}
_LABEL_TRANSLATION = str.maketrans(LABEL_REPLACEMENTS)


def sanitize_id(raw: Optional[str], fallback: str = "flow") -> str:
    """
    Turns an arbitrary name into a safe Mermaid node identifier.

    - Every character outside `[A-Za-z0-9_]` becomes `_`; runs of underscores
      collapse and leading/trailing underscores are stripped.
    - An empty result becomes `fallback`.
    - An identifier not starting with a letter is prefixed with `f_`.
    - A Mermaid keyword (any case) is prefixed with `flow_`.
    - Identifiers longer than MAX_ID_LENGTH are cut and suffixed with an
      md5-based hash of the raw name, so distinct long names stay distinct.

    The result never contains two consecutive underscores, which leaves the
    `__` separator free for identifiers the renderer derives from node ids.

    Args:
        raw (Optional[str]): The declared name.
        fallback (str): Identifier used when nothing safe is left of `raw`.

    Returns:
        str: The sanitized identifier. The same input always yields the same output.
    """
    text = raw or ""
    candidate = _UNSAFE_ID_CHARS.sub("_", text)
    candidate = _REPEATED_UNDERSCORES.sub("_", candidate).strip("_")

    if not candidate:
        candidate = fallback
    if not candidate[0].isalpha():
        candidate = f"f_{candidate}"
    if candidate.lower() in MERMAID_RESERVED_WORDS:
        candidate = f"flow_{candidate}"

    if len(candidate) > MAX_ID_LENGTH:
        digest = hashlib.md5(text.encode("utf-8")).hexdigest()[:HASH_SUFFIX_LENGTH]
        head = candidate[:MAX_ID_LENGTH - HASH_SUFFIX_LENGTH - 1].rstrip("_")
        candidate = f"{head}_{digest}"
    return candidate


def truncate_text(text: str, max_length: int) -> str:
    if max_length <= 3 or len(text) <= max_length:
        return text[:max_length] if max_length > 0 else text
    return text[:max_length - 3].rstrip() + "..."


def escape_label(text: Optional[str], fallback: str = "Unknown", max_length: int = DEFAULT_MAX_LABEL_LENGTH) -> str:
    """
    Makes a display string safe inside a quoted Mermaid label.

    Quotes, brackets, braces, angle brackets, pipes, `#` and `;` are replaced,
    whitespace (including newlines) collapses to single spaces, and the text is
    truncated to `max_length` with a trailing "...".

    Args:
        text (Optional[str]): The raw display text.
        fallback (str): Used when `text` is None or blank.
        max_length (int): Maximum label length.

    Returns:
        str: The escaped label, without surrounding quotes.
    """
    if text is None or not str(text).strip():
        text = fallback
    cleaned = str(text).translate(_LABEL_TRANSLATION)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    if not cleaned:
        cleaned = fallback
    return truncate_text(cleaned, max_length)
