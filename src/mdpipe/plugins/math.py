#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/plugins/math.py
"""Inline math validation.

The mistune ``math`` plugin matches any ``$...$`` pair, which turns prices
such as ``$100 and $200`` into math. Inline math whose value starts or ends
with whitespace is not math, so it is turned back into literal text with its
dollar delimiters.

"""

from __future__ import annotations

from mdpipe.ast.nodes import MathInline, Text
from mdpipe.ast.transforms import NodeTransformer, TransformResult


def is_valid_inline_math(value: str) -> bool:
    """Return True if ``value`` has no leading or trailing whitespace."""
    return bool(value) and not value[0].isspace() and not value[-1].isspace()


class MathValidationTransform(NodeTransformer):
    """Convert invalid inline math back to ``$value$`` text."""

    def visit_math_inline(self, node: MathInline) -> TransformResult:
        """Keep valid inline math, otherwise return the literal source text."""
        if is_valid_inline_math(node.content):
            return MathInline(content=node.content, metadata=node.metadata.copy())
        return Text(content=f"${node.content}$")
