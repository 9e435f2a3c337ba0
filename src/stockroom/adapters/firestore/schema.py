"""Pydantic models describing the Firestore REST v1 payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class FirestoreBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ValuePayload(FirestoreBaseModel):
    """A typed Firestore ``Value``; exactly one member is set."""

    string_value: str | None = Field(default=None, alias="stringValue")
    integer_value: int | None = Field(default=None, alias="integerValue")
    double_value: float | None = Field(default=None, alias="doubleValue")
    boolean_value: bool | None = Field(default=None, alias="booleanValue")
    timestamp_value: str | None = Field(default=None, alias="timestampValue")
    null_value: str | None = Field(default=None, alias="nullValue")

    def kind(self) -> str | None:
        """Return the alias of the member that is set, or ``None`` for unsupported kinds."""

        for name in self.model_fields_set:
            alias = type(self).model_fields[name].alias
            return alias or name
        return None


class DocumentPayload(FirestoreBaseModel):
    name: str
    fields: dict[str, ValuePayload] = Field(default_factory=dict)
    create_time: str | None = Field(default=None, alias="createTime")
    update_time: str | None = Field(default=None, alias="updateTime")


class RunQueryItem(FirestoreBaseModel):
    document: DocumentPayload | None = None
    read_time: str | None = Field(default=None, alias="readTime")


class ErrorDetail(FirestoreBaseModel):
    code: int
    message: str = ""
    status: str | None = None


class ErrorResponse(FirestoreBaseModel):
    error: ErrorDetail
