# Flatten grounding chunks (web pages, map places) into Citation values.
# Chunks arrive either as plain dicts or as SDK objects with .web/.maps
# attributes; both are read the same way.

from __future__ import annotations
from typing import Any, Iterable, List, Optional

from .types import Citation

UNTITLED_SOURCE = "Untitled Source"

# priority order: the first present source is the only one considered
_SOURCE_KEYS = ("web", "maps")


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _first_present(chunk: Any) -> Any:
    for key in _SOURCE_KEYS:
        source = _field(chunk, key)
        if source is not None:
            return source
    return None


def _to_citation(source: Any) -> Optional[Citation]:
    if source is None or isinstance(source, (str, bytes, int, float, bool, list, tuple)):
        return None
    uri = _field(source, "uri")
    if not isinstance(uri, str) or not uri.strip():
        return None
    title = _field(source, "title")
    if not isinstance(title, str) or not title.strip():
        title = UNTITLED_SOURCE
    # nested review snippets (placeAnswerSources) are dropped here
    return Citation(uri=uri.strip(), title=title.strip())


def normalize_citations(chunks: Optional[Iterable[Any]]) -> List[Citation]:
    """
    Map grounding chunks to citations, keeping input order.
    The web reference is used when present, else the map reference; if the
    chosen one has no usable uri the chunk is skipped. Never raises.
    """
    if chunks is None or isinstance(chunks, (str, bytes, dict)):
        return []
    try:
        items = list(chunks)
    except TypeError:
        return []

    out: List[Citation] = []
    for chunk in items:
        if chunk is None or isinstance(chunk, (str, bytes, int, float, bool)):
            continue
        # an unusable web entry drops the record; maps is not consulted
        citation = _to_citation(_first_present(chunk))
        if citation is not None:
            out.append(citation)
    return out
