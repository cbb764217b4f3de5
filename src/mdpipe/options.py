#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdpipe/options.py
"""Configuration options for the markdown pipeline.

Options are an explicit, enumerated frozen dataclass passed to ``parse`` and
``serialize``. Because they change the shape of the parsed tree, they are part
of the parse cache key.

"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, field, replace
from typing import Any, get_args

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from mdpipe.constants import DEFAULT_HARD_BREAK_STYLE, DEFAULT_PRESERVE_LINE_BREAKS, HardBreakStyle
from mdpipe.exceptions import ValidationError


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class PipelineOptions(CloneFrozenMixin):
    """Options controlling how markdown is parsed and serialized.

    Parameters
    ----------
    preserve_line_breaks : bool, default False
        Treat soft line breaks (a single newline inside a paragraph) as hard
        breaks when parsing.
    hard_break_style : {"backslash", "trailing-spaces"}, default "backslash"
        How hard line breaks are written when serializing.

    Examples
    --------
        >>> options = PipelineOptions(preserve_line_breaks=True)
        >>> options.cache_key()
        '{"hard_break_style": "backslash", "preserve_line_breaks": true}'

    """

    preserve_line_breaks: bool = field(
        default=DEFAULT_PRESERVE_LINE_BREAKS,
        metadata={"help": "Convert soft line breaks into hard breaks while parsing", "importance": "core"},
    )
    hard_break_style: HardBreakStyle = field(
        default=DEFAULT_HARD_BREAK_STYLE,
        metadata={
            "help": "Hard break markup written by the serializer",
            "choices": ["backslash", "trailing-spaces"],
            "importance": "core",
        },
    )

    def __post_init__(self) -> None:
        """Validate option values.

        Raises
        ------
        ValidationError
            If any field holds an unsupported value.

        """
        if not isinstance(self.preserve_line_breaks, bool):
            raise ValidationError(
                f"preserve_line_breaks must be a bool, got {type(self.preserve_line_breaks).__name__}",
                parameter_name="preserve_line_breaks",
                parameter_value=self.preserve_line_breaks,
            )
        if self.hard_break_style not in get_args(HardBreakStyle):
            raise ValidationError(
                f"hard_break_style must be one of {get_args(HardBreakStyle)}, got {self.hard_break_style!r}",
                parameter_name="hard_break_style",
                parameter_value=self.hard_break_style,
            )

    def cache_key(self) -> str:
        """Serialize the options deterministically for use in cache keys."""
        return json.dumps(asdict(self), sort_keys=True)


def options_cache_key(options: PipelineOptions | None) -> str:
    """Return the cache-key fragment for ``options``, empty when none were given."""
    return "" if options is None else options.cache_key()
