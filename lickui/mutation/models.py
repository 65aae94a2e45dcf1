"""Instruction models for the mutation engine.

Instructions come from a language model or canned buttons and are
untrusted.  Each entry is validated on its own so one malformed entry does
not discard the rest of the batch.
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, Field, ValidationError, field_validator


class CssInstruction(BaseModel):
    selector: str
    styles: dict[str, str] = Field(default_factory=dict)

    @field_validator("styles", mode="before")
    @classmethod
    def _stringify_values(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): "" if v is None else str(v) for k, v in value.items()}
        return value


class ActionInstruction(BaseModel):
    type: Literal["hide", "show", "move", "text", "remove"]
    selector: str
    target: str | None = None
    position: Literal["before", "after", "inside"] | None = None
    value: str | None = None


Instruction = Union[CssInstruction, ActionInstruction]


class InstructionBatch(BaseModel):
    """A parsed reply: ordered CSS rules, then DOM actions, plus a message."""

    css: list[CssInstruction] = Field(default_factory=list)
    actions: list[ActionInstruction] = Field(default_factory=list)
    message: str = ""
    # Entries that failed validation, as "css[1]: <reason>" strings.
    rejected: list[str] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> InstructionBatch:
        """Build a batch from decoded JSON, keeping every valid entry."""
        if not isinstance(payload, dict):
            return cls(rejected=["payload: expected a JSON object"])

        batch = cls(message=str(payload.get("message") or ""))
        for key, model in (("css", CssInstruction), ("actions", ActionInstruction)):
            entries = payload.get(key) or []
            if not isinstance(entries, list):
                batch.rejected.append(f"{key}: expected a list")
                continue
            target = batch.css if key == "css" else batch.actions
            for i, entry in enumerate(entries):
                try:
                    target.append(model.model_validate(entry))
                except ValidationError as exc:
                    batch.rejected.append(f"{key}[{i}]: {exc.errors()[0]['msg']}")
        return batch


class InstructionOutcome(BaseModel):
    kind: str  # "css" or the action type
    selector: str
    applied: bool
    matched: int = 0
    used_selection: bool = False
    error: str | None = None


class ApplicationReport(BaseModel):
    outcomes: list[InstructionOutcome] = Field(default_factory=list)
    message: str = ""

    @property
    def ok(self) -> bool:
        return all(o.applied for o in self.outcomes)

    @property
    def failures(self) -> list[InstructionOutcome]:
        return [o for o in self.outcomes if not o.applied]

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "message": self.message,
            "outcomes": [o.model_dump() for o in self.outcomes],
        }
