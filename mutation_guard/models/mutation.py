"""Proposed mutation models.

A proposed mutation is the caller's description of an intended change,
submitted to the constraint validator. Each variant carries only the fields
that make sense for its action type.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import Field, TypeAdapter

from .base import RequestModel


class ReadFile(RequestModel):
    type: Literal["read_file"] = "read_file"
    target_path: str


class CreateFile(RequestModel):
    type: Literal["create_file"] = "create_file"
    target_path: str
    content: str | None = None
    imports: list[str] = []
    exports: list[str] = []
    dependencies: list[str] = []


class WriteFile(RequestModel):
    type: Literal["write_file"] = "write_file"
    target_path: str
    content: str | None = None
    imports: list[str] = []
    exports: list[str] = []
    dependencies: list[str] = []


class ApplyPatch(RequestModel):
    type: Literal["apply_patch"] = "apply_patch"
    target_path: str
    content: str | None = None  # resulting file content, if known
    imports: list[str] = []
    exports: list[str] = []


class DeleteFile(RequestModel):
    type: Literal["delete_file"] = "delete_file"
    target_path: str


class MoveFile(RequestModel):
    type: Literal["move_file"] = "move_file"
    source_path: str
    target_path: str


class InstallDependency(RequestModel):
    type: Literal["install_dependency"] = "install_dependency"
    dependencies: list[str]


ProposedMutation = Annotated[
    Union[ReadFile, CreateFile, WriteFile, ApplyPatch, DeleteFile, MoveFile, InstallDependency],
    Field(discriminator="type"),
]

mutation_adapter: TypeAdapter[ProposedMutation] = TypeAdapter(ProposedMutation)


def parse_mutation(data: dict) -> ProposedMutation:
    """Build a typed mutation from a loose dict (raises pydantic.ValidationError)."""
    return mutation_adapter.validate_python(data)
