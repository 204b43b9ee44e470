"""Annotation passes run in order over the token stream."""

from typing import List

from sqlpolish.formatter.config import FormatterConfig
from sqlpolish.formatter.passes.align import AlignPass
from sqlpolish.formatter.passes.base import (
    AnnotationPass,
    next_significant,
    prev_significant,
    token_at,
)
from sqlpolish.formatter.passes.casing import CasingPass, apply_case
from sqlpolish.formatter.passes.comments import CommentsPass, reformat_block_comment
from sqlpolish.formatter.passes.spacing import SpacingPass
from sqlpolish.formatter.passes.structure import StructurePass
from sqlpolish.formatter.passes.transform import TransformPass

__all__ = [
    "AlignPass",
    "AnnotationPass",
    "CasingPass",
    "CommentsPass",
    "SpacingPass",
    "StructurePass",
    "TransformPass",
    "apply_case",
    "build_passes",
    "next_significant",
    "prev_significant",
    "reformat_block_comment",
    "token_at",
]


def build_passes(config: FormatterConfig) -> List[AnnotationPass]:
    """Create the pass pipeline.

    Layout passes (structure, spacing, casing, transform) run first; the
    comments and align passes adjust the finished layout.
    """
    return [
        StructurePass(config),
        SpacingPass(config),
        CasingPass(config),
        TransformPass(config),
        CommentsPass(config),
        AlignPass(config),
    ]
