"""Plot record data models.

Field aliases follow the record store's wire names (``Permit``, ``Lot``,
``DecNama``...). Occupied rows arrive with the deceased columns flattened
next to the plot columns; :meth:`PlotRecord.from_row` folds them into a
nested :class:`DeceasedInfo`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from gravemap.core.types import Sex
from gravemap.geo.coordinates import require_decimal_degrees

# Decimal degrees or a DMS string
Coordinate = float | str

_DECEASED_COLUMNS = ("DecID", "DecNama", "DecSurname", "Sex", "DoB", "DoD")


class DeceasedInfo(BaseModel):
    """The person buried in an occupied plot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(alias="DecID")
    first_name: str = Field(default="", alias="DecNama")
    surname: str = Field(default="", alias="DecSurname")
    sex: Sex | None = Field(default=None, alias="Sex")
    date_of_birth: str = Field(default="", alias="DoB")
    date_of_death: str = Field(default="", alias="DoD")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator("sex", mode="before")
    @classmethod
    def _normalize_sex(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().upper()
            return value or None
        return value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}".strip()


class PlotRecord(BaseModel):
    """A single burial plot as fetched from the record store."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    permit_id: str = Field(alias="Permit")
    lot: str = Field(default="", alias="Lot")
    block: str = Field(default="", alias="Block")
    grave: str = Field(default="", alias="Grave")
    status: str | None = Field(default=None, alias="Status")
    lat: Coordinate | None = None
    lng: Coordinate | None = None
    deceased: DeceasedInfo | None = None

    @field_validator("permit_id", "lot", "block", "grave", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value) if isinstance(value, (int, float)) else value

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> PlotRecord:
        """Build a record from a flat store row, nesting deceased columns."""
        data = {k: v for k, v in row.items() if k not in _DECEASED_COLUMNS}
        if row.get("DecID") is not None:
            data["deceased"] = DeceasedInfo.model_validate(
                {k: row[k] for k in _DECEASED_COLUMNS if k in row}
            )
        return cls.model_validate(data)

    def to_row(self) -> dict[str, Any]:
        """Inverse of :meth:`from_row`."""
        row = self.model_dump(by_alias=True, exclude={"deceased"})
        if self.deceased is not None:
            row.update(self.deceased.model_dump(by_alias=True, mode="json"))
        return row


class AvailablePlotInput(BaseModel):
    """Input for registering an available plot.

    Coordinates may be given in either representation and are stored as
    decimal degrees.
    """

    model_config = ConfigDict(populate_by_name=True)

    permit_id: str = Field(alias="Permit", min_length=1)
    lot: str = Field(alias="Lot", min_length=1)
    block: str = Field(alias="Block", min_length=1)
    grave: str = Field(alias="Grave", min_length=1)
    status: str = Field(default="Available", alias="Status")
    lat: float
    lng: float

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _to_decimal(cls, value: Any, info: ValidationInfo) -> float:
        return require_decimal_degrees(value, field=info.field_name)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class OccupiedPlotInput(AvailablePlotInput):
    """Input for registering an occupied plot together with its deceased."""

    status: str = Field(default="Occupied", alias="Status")
    deceased_id: str = Field(alias="DecID", min_length=1)
    first_name: str = Field(alias="DecNama", min_length=1)
    surname: str = Field(alias="DecSurname", min_length=1)
    sex: Sex = Field(alias="sex")
    date_of_birth: str = Field(alias="DoB")
    date_of_death: str = Field(alias="DoD")

    @field_validator("sex", mode="before")
    @classmethod
    def _normalize_sex(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value
