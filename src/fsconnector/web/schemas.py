"""Request and response models for the connector web API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field

from fsconnector.models import (
    BinaryValue,
    BooleanValue,
    DecimalValue,
    DoubleValue,
    Document,
    IntegerValue,
    LargeStringValue,
    LongValue,
    Metadata,
    MetadataValue,
    StringArrayValue,
    StringValue,
    TimestampValue,
)

MetadataKind = Literal[
    "string",
    "large_string",
    "integer",
    "long",
    "double",
    "decimal",
    "boolean",
    "binary",
    "array",
    "timestamp",
]


class DocumentModel(BaseModel):
    id: str
    name: str
    created: datetime
    modified: datetime
    mime_type: str = "application/octet-stream"
    size: int = 0
    parent_path: str = ""

    @classmethod
    def from_document(cls, document: Document) -> "DocumentModel":
        return cls(
            id=document.id,
            name=document.name,
            created=document.created,
            modified=document.modified,
            mime_type=document.mime_type,
            size=document.size,
            parent_path=document.parent_path,
        )

    def to_document(self) -> Document:
        return Document(
            id=self.id,
            name=self.name,
            created=self.created,
            modified=self.modified,
            mime_type=self.mime_type,
            size=self.size,
            parent_path=self.parent_path,
        )


class MetadataEntry(BaseModel):
    """Tagged metadata value; ``kind`` is unset for an empty entry.

    Binary values travel as hex strings and timestamps as
    ``{"seconds": ..., "nanos": ...}``.
    """

    kind: MetadataKind | None = None
    value: Any = None

    @classmethod
    def from_value(cls, value: MetadataValue | None) -> "MetadataEntry":
        match value:
            case StringArrayValue(values=values):
                return cls(kind="array", value=list(values))
            case BinaryValue(value=raw):
                return cls(kind="binary", value=bytes(raw).hex())
            case BooleanValue(value=flag):
                return cls(kind="boolean", value=flag)
            case DoubleValue(value=number):
                return cls(kind="double", value=number)
            case DecimalValue(value=number):
                return cls(kind="decimal", value=number)
            case TimestampValue(seconds=seconds, nanos=nanos):
                return cls(kind="timestamp", value={"seconds": seconds, "nanos": nanos})
            case IntegerValue(value=number):
                return cls(kind="integer", value=number)
            case LargeStringValue(value=text):
                return cls(kind="large_string", value=text)
            case LongValue(value=number):
                return cls(kind="long", value=number)
            case StringValue(value=text):
                return cls(kind="string", value=text)
            case None:
                return cls()
            case _:
                raise TypeError(f"Unsupported metadata value: {value!r}")

    def to_value(self) -> MetadataValue | None:
        match self.kind:
            case "array":
                return StringArrayValue(tuple(str(item) for item in self.value or ()))
            case "binary":
                return BinaryValue(bytes.fromhex(self.value))
            case "boolean":
                return BooleanValue(bool(self.value))
            case "double":
                return DoubleValue(float(self.value))
            case "decimal":
                return DecimalValue(float(self.value))
            case "timestamp":
                return TimestampValue(int(self.value["seconds"]), int(self.value.get("nanos", 0)))
            case "integer":
                return IntegerValue(int(self.value))
            case "large_string":
                return LargeStringValue(str(self.value))
            case "long":
                return LongValue(int(self.value))
            case "string":
                return StringValue(str(self.value))
            case _:
                return None


def metadata_to_json(metadata: Metadata) -> Dict[str, MetadataEntry]:
    return {key: MetadataEntry.from_value(value) for key, value in metadata.items()}


def metadata_from_json(entries: Dict[str, MetadataEntry]) -> Metadata:
    return {key: entry.to_value() for key, entry in entries.items()}


class ListPayload(BaseModel):
    file_path: str | None = None
    start_time: int | None = Field(None, description="Earliest modification time, epoch ms")
    end_time: int | None = Field(None, description="Latest modification time, epoch ms")
    include_binaries: bool | None = None


class DocumentsResponse(BaseModel):
    documents: List[DocumentModel]


class MetadataResponse(BaseModel):
    doc_id: str
    metadata: Dict[str, MetadataEntry]


class WriteResponse(BaseModel):
    status: str = "ok"
    document: DocumentModel
