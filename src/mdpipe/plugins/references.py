#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/plugins/references.py
"""Link reference definitions.

Reference links (``[text][label]``, ``[label][]`` and ``[label]``) are
resolved by mistune while parsing, which matches labels case-insensitively
and leaves undefined references as literal text. The definitions themselves
are not part of mistune's token stream; they are collected from the parser
state so they can be kept in the tree and written back out.

"""

from __future__ import annotations

from typing import Any, Mapping

from mistune.util import unescape

from mdpipe.ast.nodes import LinkDefinition


def normalize_label(label: str) -> str:
    """Normalize a reference label for matching.

    Labels match case-insensitively with runs of whitespace collapsed.

    Parameters
    ----------
    label : str
        Label as written in the source

    Returns
    -------
    str
        Normalized label

    Examples
    --------
        >>> normalize_label("  Foo   Bar ")
        'foo bar'

    """
    return " ".join(label.split()).casefold()


def collect_link_definitions(env: Mapping[str, Any]) -> list[LinkDefinition]:
    """Build LinkDefinition nodes from a mistune parser environment.

    Parameters
    ----------
    env : mapping
        The ``state.env`` mapping after parsing

    Returns
    -------
    list of LinkDefinition
        One node per distinct label, in definition order

    """
    ref_links = env.get("ref_links") or {}
    definitions: list[LinkDefinition] = []
    for key, attrs in ref_links.items():
        if not isinstance(attrs, Mapping):
            continue
        label = attrs.get("label") or key
        definitions.append(
            LinkDefinition(
                identifier=normalize_label(label),
                url=attrs.get("url", ""),
                title=unescape(attrs["title"]) if attrs.get("title") else None,
                label=label,
            )
        )
    return definitions
