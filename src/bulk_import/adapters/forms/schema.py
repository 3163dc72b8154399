"""Pydantic model for the parameters submitted with an upload."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Self, cast

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bulk_import.domain.model import ImportParams


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ImportFormPayload(BaseModel):
    """Upload form values as browsers send them.

    Flags arrive as ``"1"``/``"0"``, the lookup selection as a list or a comma
    separated string, and ``file`` either as a name or as an uploaded-file object
    exposing ``original_filename`` or ``filename``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    update_if_exists: bool = False
    update_lookup: list[str] = Field(default_factory=list[str])
    associations: dict[str, str] = Field(default_factory=dict[str, str])
    skip_fuzzy_search: bool = False
    filename: str | None = Field(default=None, alias="file")

    @field_validator("update_if_exists", "skip_fuzzy_search", mode="before")
    @classmethod
    def _blank_flag(cls, value: object) -> object:
        return False if value is None or value == "" else value

    @field_validator("update_lookup", mode="before")
    @classmethod
    def _split_lookup(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            items = cast(list[object], list(value))
            return [item.strip() for item in items if isinstance(item, str) and item.strip()]
        return value

    @field_validator("associations", mode="before")
    @classmethod
    def _drop_blank_keys(cls, value: object) -> object:
        if not isinstance(value, Mapping):
            return value
        mapping = cast(Mapping[str, object], value)
        return {
            str(name): key.strip()
            for name, key in mapping.items()
            if isinstance(key, str) and key.strip()
        }

    @field_validator("filename", mode="before")
    @classmethod
    def _uploaded_name(cls, value: object) -> object:
        for attribute in ("original_filename", "filename"):
            name = getattr(value, attribute, None)
            if isinstance(name, str):
                return _blank_to_none(name)
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _lookup_required(self) -> Self:
        if self.update_if_exists and not self.update_lookup:
            raise ValueError("update_lookup must name at least one field when update_if_exists")
        return self

    def to_params(self) -> ImportParams:
        return ImportParams(
            update_if_exists=self.update_if_exists,
            update_lookup=tuple(self.update_lookup),
            associations=dict(self.associations),
            skip_fuzzy_search=self.skip_fuzzy_search,
            filename=self.filename,
        )


def params_from_form(form: Mapping[str, object]) -> ImportParams:
    """Validate raw form data and return engine parameters."""

    return ImportFormPayload.model_validate(dict(form)).to_params()
