from regintel.ingestion.base import BaseSource, create_client
from regintel.ingestion.cdc import CDCAdvisorySource, CDCOutbreakSource
from regintel.ingestion.epa import EPAEnforcementSource
from regintel.ingestion.fda import OpenFDADrugEventSource, OpenFDADrugShortageSource, OpenFDAEnforcementSource
from regintel.ingestion.federal_register import FederalRegisterSource
from regintel.ingestion.fsis import FSISRecallSource
from regintel.ingestion.regulations_gov import RegulationsGovSource

__all__ = [
    "BaseSource",
    "create_client",
    "CDCAdvisorySource",
    "CDCOutbreakSource",
    "EPAEnforcementSource",
    "OpenFDADrugEventSource",
    "OpenFDADrugShortageSource",
    "OpenFDAEnforcementSource",
    "FederalRegisterSource",
    "FSISRecallSource",
    "RegulationsGovSource",
]
