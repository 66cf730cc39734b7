"""Source-native records, tagged by the agency that produced them."""

from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, Field


class _SourceRecord(BaseModel):
    # Sub-endpoint or feed the payload came from (e.g. "food", "rss")
    origin: str
    payload: Dict[str, Any] = Field(default_factory=dict)


class FDARecord(_SourceRecord):
    source: Literal["FDA"] = "FDA"


class FSISRecord(_SourceRecord):
    source: Literal["FSIS"] = "FSIS"


class CDCRecord(_SourceRecord):
    source: Literal["CDC"] = "CDC"
    kind: Literal["outbreak", "advisory"]


class EPARecord(_SourceRecord):
    source: Literal["EPA"] = "EPA"


class FederalRegisterRecord(_SourceRecord):
    source: Literal["FEDERAL_REGISTER"] = "FEDERAL_REGISTER"


class RegulationsGovRecord(_SourceRecord):
    source: Literal["REGULATIONS_GOV"] = "REGULATIONS_GOV"


SourceRecord = Annotated[
    Union[FDARecord, FSISRecord, CDCRecord, EPARecord, FederalRegisterRecord, RegulationsGovRecord],
    Field(discriminator="source"),
]
