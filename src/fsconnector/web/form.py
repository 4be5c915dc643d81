"""Connector form fields shown by the host when configuring a repository."""

from __future__ import annotations

from typing import List, Literal

from fastapi import APIRouter
from pydantic import BaseModel

from fsconnector.config import FILE_PATH, METADATA_AS_XML

router = APIRouter(prefix="/forms", tags=["forms"])


class Field(BaseModel):
    id: str
    label: str
    kind: Literal["text", "checkbox"] = "text"
    description: str | None = None
    default: bool | str | None = None


def source_repository_fields() -> List[Field]:
    return [Field(id=FILE_PATH, label="File Path")]


def output_repository_fields() -> List[Field]:
    return [
        Field(id=FILE_PATH, label="Output File Path"),
        Field(id=METADATA_AS_XML, label="Output Metadata as XML", kind="checkbox", default=True),
    ]


@router.get("/source")
async def source_fields() -> List[Field]:
    return source_repository_fields()


@router.get("/output")
async def output_fields() -> List[Field]:
    return output_repository_fields()
