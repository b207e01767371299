"""Tree-sitter integration: optional, readers that need it report unavailable.

Install with: pip install tree-sitter-language-pack
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# Common exception tuple for tree-sitter parser initialisation failures.
PARSE_INIT_ERRORS: tuple[type[Exception], ...] = (
    ImportError, OSError, ValueError, RuntimeError, LookupError
)

_AVAILABLE = False
try:
    import tree_sitter_language_pack

    _AVAILABLE = True
    # Releases that fetch grammars on demand raise their own error family.
    _pack_error = getattr(tree_sitter_language_pack, "Error", None)
    if isinstance(_pack_error, type) and issubclass(_pack_error, Exception):
        PARSE_INIT_ERRORS = (*PARSE_INIT_ERRORS, _pack_error)
except ImportError:
    logger.debug("tree-sitter-language-pack not installed; tree-sitter readers disabled")


def is_available() -> bool:
    """Return True if tree-sitter-language-pack is installed."""
    return _AVAILABLE


def get_parser(grammar: str):
    """Get a tree-sitter parser for the given grammar."""
    from tree_sitter_language_pack import get_parser as _get_parser

    return _get_parser(grammar)


def node_text(node) -> str:
    """Get text from a node as a str."""
    if node is None:
        return ""
    text = node.text
    if isinstance(text, bytes):
        return text.decode("utf-8", errors="replace")
    return str(text)


def field(node, *names: str):
    """First non-None ``child_by_field_name`` among *names* (grammar versions differ)."""
    for name in names:
        child = node.child_by_field_name(name)
        if child is not None:
            return child
    return None


__all__ = ["PARSE_INIT_ERRORS", "field", "get_parser", "is_available", "node_text"]
