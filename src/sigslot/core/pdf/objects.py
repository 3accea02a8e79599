"""Typed accessors over the pikepdf object model.

Small helpers used by the placeholder preparer: shape-checked access to
dictionaries and arrays, the page-tree walk to the first page, and the
PDF date/rectangle builders.

Placeholder construction is in placeholder.py.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ...errors import ConfigError, PDFError
from .. import require_pikepdf as _require_pikepdf

if TYPE_CHECKING:
    from collections.abc import Sequence

    import pikepdf

# Page trees deeper than this are treated as cyclic
_MAX_PAGE_TREE_DEPTH = 64


def require_dictionary(obj: object, what: str) -> pikepdf.Dictionary:
    """Return *obj* if it is a PDF dictionary, else raise PDFError.

    Args:
        obj: Object returned by pikepdf (already dereferenced).
        what: Description of the entry for the error message.
    """
    pikepdf = _require_pikepdf()
    if not isinstance(obj, pikepdf.Dictionary):
        raise PDFError(f"Expected a dictionary for {what}, got {type(obj).__name__}")
    return obj


def require_array(obj: object, what: str) -> pikepdf.Array:
    """Return *obj* if it is a PDF array, else raise PDFError."""
    pikepdf = _require_pikepdf()
    if not isinstance(obj, pikepdf.Array):
        raise PDFError(f"Expected an array for {what}, got {type(obj).__name__}")
    return obj


def _is_page_node(node: pikepdf.Dictionary) -> bool:
    pikepdf = _require_pikepdf()
    node_type = node.get("/Type")
    if node_type is not None:
        return node_type == pikepdf.Name.Page
    # /Type is required, but some writers omit it on leaves
    return "/Kids" not in node


def first_page(pdf: pikepdf.Pdf) -> pikepdf.Dictionary:
    """Walk catalog -> /Pages -> /Kids[0] ... down to the first leaf page.

    Intermediate /Pages nodes are descended through their first kid.

    Raises:
        PDFError: If the page tree is missing, empty, malformed, or cyclic.
    """
    node = require_dictionary(pdf.Root.get("/Pages"), "catalog /Pages")
    for _ in range(_MAX_PAGE_TREE_DEPTH):
        if _is_page_node(node):
            return node
        kids = require_array(node.get("/Kids"), "page tree /Kids")
        if len(kids) == 0:
            raise PDFError("Page tree has no pages.")
        node = require_dictionary(kids[0], "page tree /Kids[0]")
    raise PDFError(f"Page tree deeper than {_MAX_PAGE_TREE_DEPTH} levels -- cyclic /Kids?")


def pdf_date(dt: datetime | None = None) -> str:
    """Format *dt* (default: now) as a PDF date string in UTC.

    >>> pdf_date(datetime(2020, 6, 29, 0, 8, 22, tzinfo=timezone.utc))
    "D:20200629000822+00'00'"
    """
    if dt is None:
        dt = datetime.now(timezone.utc)
    elif dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.strftime("D:%Y%m%d%H%M%S+00'00'")


def pdf_rect(rect: Sequence[float]) -> pikepdf.Array:
    """Build a /Rect array from four numbers (x1, y1, x2, y2).

    A zero-area rectangle is accepted and yields an invisible signature.

    Raises:
        ConfigError: If *rect* is not four finite numbers.
    """
    pikepdf = _require_pikepdf()
    values = list(rect)
    if len(values) != 4:
        raise ConfigError(f"Rectangle needs 4 numbers (x1 y1 x2 y2), got {len(values)}")
    for v in values:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ConfigError(f"Rectangle coordinates must be numbers, got {v!r}")
        if v != v or v in (float("inf"), float("-inf")):
            raise ConfigError(f"Rectangle coordinates must be finite, got {v!r}")
    return pikepdf.Array(values)
