"""Pydantic models for the declarations manifest and the inference report."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


# ── Declarations manifest (front-end hand-off) ───────────────────────────

class EffectDecl(BaseModel):
    label: str
    arguments: list[str] = Field(default_factory=list)   # expression syntax
    output: str | None = None                            # output binding name


class StatementDecl(BaseModel):
    op: str                   # "literal"|"move"|"call"; anything else is unsupported
    target: str | None = None
    value: str | None = None      # literal
    source: str | None = None     # move
    function: str | None = None   # call
    arguments: list[str] = Field(default_factory=list)
    detail: str = ""


class FunctionDecl(BaseModel):
    name: str
    kind: Literal["declared", "inferred"] = "declared"
    parameters: list[str] = Field(default_factory=list)
    # Either structured EffectDecl entries or "label(arg, ...) as out" strings
    effects: list[EffectDecl | str] = Field(default_factory=list)
    updates: dict[str, str] = Field(default_factory=dict)
    returns: str | None = None
    body: list[StatementDecl] = Field(default_factory=list)


class DeclarationsManifest(BaseModel):
    entrypoint: str | None = None
    functions: list[FunctionDecl] = Field(default_factory=list)
    # Declarations for functions whose bodies are not visible (libraries)
    externals: list[FunctionDecl] = Field(default_factory=list)


# ── Inference report ─────────────────────────────────────────────────────

DiagnosticKind = Literal[
    "unknown_function",
    "recursive_cycle",
    "dangling_reference",
    "unsupported_statement",
    "depth_limit",
]


class Diagnostic(BaseModel):
    """A local degradation of coverage; never fatal to the run."""
    kind: DiagnosticKind
    function: str
    message: str


class EffectRecord(BaseModel):
    label: str
    arguments: list[str] = Field(default_factory=list)   # rendered text
    resolved: bool = True

    def line(self) -> str:
        return f"Side effect: {self.label}({', '.join(self.arguments)})"


class InferenceReport(BaseModel):
    entrypoint: str
    effects: list[EffectRecord] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    functions_inferred: list[str] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        """True when any function's coverage was degraded."""
        return bool(self.diagnostics)

    def lines(self) -> list[str]:
        return [e.line() for e in self.effects]
