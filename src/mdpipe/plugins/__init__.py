#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/plugins/__init__.py
"""Grammar extensions applied on top of the base markdown grammars.

Each extension is a syntax tree transform built on
:class:`mdpipe.ast.transforms.NodeTransformer`. Frontmatter additionally
registers a mistune hook, and references read mistune's parser state.

- custom_inline: ``==highlight==``, ``++underline++``, ``^sup^``, ``~sub~``
- details: ``<details>`` HTML blocks
- alerts: ``> [!NOTE]`` block quotes
- wiki_links: ``[[target|alias]]`` and ``![[embed]]``
- math: inline math validation
- frontmatter: leading YAML block
- references: link reference definitions
- breaks: soft breaks as hard breaks

"""

from mdpipe.plugins.alerts import AlertTransform
from mdpipe.plugins.breaks import BreaksTransform
from mdpipe.plugins.custom_inline import (
    MARKERS_BY_TYPE,
    MARKS,
    CustomInlineTransform,
    MarkDefinition,
    find_mark_pair,
    parse_marks_in_nodes,
    parse_marks_in_text,
)
from mdpipe.plugins.details import DetailsTransform
from mdpipe.plugins.frontmatter import frontmatter, parse_frontmatter, split_frontmatter
from mdpipe.plugins.math import MathValidationTransform
from mdpipe.plugins.references import collect_link_definitions, normalize_label
from mdpipe.plugins.wiki_links import WikiLinkTransform

__all__ = [
    "MARKERS_BY_TYPE",
    "MARKS",
    "AlertTransform",
    "BreaksTransform",
    "CustomInlineTransform",
    "DetailsTransform",
    "MarkDefinition",
    "MathValidationTransform",
    "WikiLinkTransform",
    "collect_link_definitions",
    "find_mark_pair",
    "frontmatter",
    "normalize_label",
    "parse_frontmatter",
    "parse_marks_in_nodes",
    "parse_marks_in_text",
    "split_frontmatter",
]
