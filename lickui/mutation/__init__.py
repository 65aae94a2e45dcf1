"""Mutation engine: instruction models, reply parsing and application."""

from lickui.mutation.engine import MutationEngine, apply_instructions
from lickui.mutation.extraction import extract_json_object
from lickui.mutation.models import (
    ActionInstruction,
    ApplicationReport,
    CssInstruction,
    InstructionBatch,
    InstructionOutcome,
)

__all__ = [
    "MutationEngine",
    "apply_instructions",
    "extract_json_object",
    "ActionInstruction",
    "ApplicationReport",
    "CssInstruction",
    "InstructionBatch",
    "InstructionOutcome",
]
