"""Result model of a parse invocation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

MetadataValue = str | int | float | bool | list[str]


class ExtractionRecord(BaseModel):
    """Content, metadata and embedded objects extracted from one document."""

    model_config = ConfigDict(frozen=True)

    content: str = ""
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)
    embedded: dict[str, str] = Field(default_factory=dict)  # file name -> storage URI


class ParseOutput(BaseModel):
    """Either the record itself or a URI pointing to its serialized form."""

    model_config = ConfigDict(frozen=True)

    result: ExtractionRecord | None = None
    uri: str | None = None

    @model_validator(mode="after")
    def _exactly_one(self) -> ParseOutput:
        if (self.result is None) == (self.uri is None):
            raise ValueError("exactly one of 'result' or 'uri' must be set")
        return self
