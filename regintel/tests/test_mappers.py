"""Normalization mapper tests"""

from datetime import datetime, timezone

import pytest

from conftest import fda_item
from regintel.normalization import (
    map_cdc,
    map_epa,
    map_fda,
    map_federal_register,
    map_fsis,
    map_record,
    map_regulations_gov,
)
from regintel.schemas.records import (
    CDCRecord,
    EPARecord,
    FDARecord,
    FederalRegisterRecord,
    FSISRecord,
    RegulationsGovRecord,
)


class TestFDAMapper:
    """openFDA enforcement reports"""

    @pytest.mark.parametrize(
        "classification,expected",
        [
            ("Class I", "Critical"),
            ("Class II", "High"),
            ("Class III", "Low"),
            (None, "Medium"),
            ("Not Yet Classified", "Medium"),
        ],
    )
    def test_severity_from_classification(self, classification, expected):
        alert = map_fda(FDARecord(origin="food", payload=fda_item("F-1", classification=classification)))
        assert alert.severity == expected

    @pytest.mark.parametrize("classification", [1, ["Class I"], {"class": "I"}])
    def test_non_string_classification_is_neutral(self, classification):
        alert = map_fda(FDARecord(origin="food", payload=fda_item("F-7", classification=classification)))
        assert alert.severity == "Medium"
        assert alert.external_id == "F-7"

    def test_fields(self):
        alert = map_fda(FDARecord(origin="food", payload=fda_item("  f-0042-2026 ", product_type="Food")))

        assert alert.external_id == "F-0042-2026"
        assert alert.source == "FDA"
        assert alert.category == "recall"
        assert alert.title == "Acme Foods: Organic peanut butter, 16 oz jars"
        assert alert.summary == "Potential Salmonella contamination"
        assert alert.locations == ["CA", "CA", "NV", "OR"]
        assert alert.product_types == ["Food"]
        assert alert.jurisdiction == "US"
        assert alert.date_published == "2026-10-01T00:00:00+00:00"
        assert alert.link_url.endswith("Event=93012")
        assert len(alert.hash) == 64

    def test_falls_back_to_event_id(self):
        alert = map_fda(FDARecord(origin="device", payload=fda_item(None, event_id="88123")))

        assert alert.external_id == "88123"
        assert alert.product_types == ["Medical Device"]

    def test_missing_fields_do_not_raise(self):
        alert = map_fda(FDARecord(origin="drug", payload={}))

        assert alert.external_id == ""
        assert alert.title == "FDA Recall"
        assert alert.severity == "Medium"
        assert alert.date_published

    def test_hash_is_stable_and_content_sensitive(self):
        record = FDARecord(origin="food", payload=fda_item("F-1"))
        changed = FDARecord(origin="food", payload=fda_item("F-1", reason_for_recall="Undeclared milk"))

        assert map_fda(record).hash == map_fda(record).hash
        assert map_fda(record).hash != map_fda(changed).hash


class TestFDADrugMappers:
    """openFDA adverse events and drug shortages"""

    def event(self, **overrides):
        item = {
            "safetyreportid": "20261234",
            "receivedate": "20261005",
            "serious": "1",
            "occurcountry": "US",
            "patient": {
                "drug": [{"medicinalproduct": "WARFARIN"}, {"medicinalproduct": "ASPIRIN"}, {"medicinalproduct": "WARFARIN"}],
                "reaction": [{"reactionmeddrapt": "Haemorrhage"}, {"reactionmeddrapt": "Anaemia"}],
            },
        }
        item.update(overrides)
        return FDARecord(origin="drug_event", payload=item)

    def test_adverse_event_fields(self):
        alert = map_fda(self.event())

        assert alert.external_id == "20261234"
        assert alert.category == "adverse_event"
        assert alert.severity == "High"
        assert alert.title == "Adverse event report: WARFARIN, ASPIRIN"
        assert alert.summary == "Reactions: Haemorrhage, Anaemia"
        assert alert.product_types == ["Drug"]
        assert alert.date_published == "2026-10-05T00:00:00+00:00"

    def test_adverse_event_death_is_critical(self):
        assert map_fda(self.event(seriousnessdeath="1")).severity == "Critical"

    def test_adverse_event_malformed_patient(self):
        alert = map_fda(self.event(patient="n/a"))
        assert alert.title == "FDA Adverse Event Report"
        assert alert.summary == ""

    @pytest.mark.parametrize("status,expected", [("Current", "High"), ("Resolved", "Low"), (None, "Medium")])
    def test_shortage(self, status, expected):
        item = {
            "package_ndc": "0409-4888-10",
            "generic_name": "Lidocaine Hydrochloride",
            "dosage_form": "Injection",
            "status": status,
            "shortage_reason": "Demand increase for the drug",
            "initial_posting_date": "03/01/2026",
            "update_date": "10/02/2026",
        }
        alert = map_fda(FDARecord(origin="drug_shortage", payload=item))

        assert alert.external_id == "0409-4888-10"
        assert alert.category == "shortage"
        assert alert.severity == expected
        assert alert.title == "Drug shortage: Lidocaine Hydrochloride (Injection)"
        assert alert.date_published == "2026-03-01T00:00:00+00:00"
        assert alert.date_updated == "2026-10-02T00:00:00+00:00"

    def test_shortage_without_ndc_keys_on_name(self):
        alert = map_fda(FDARecord(origin="drug_shortage", payload={"generic_name": "Amoxicillin", "dosage_form": "Tablet"}))
        assert alert.external_id == "AMOXICILLIN TABLET"


class TestFSISMapper:
    """FSIS recalls from the API or RSS"""

    def test_api_item(self):
        alert = map_fsis(
            FSISRecord(
                origin="api",
                payload={
                    "field_title": "<p>Acme Meats Recalls Beef &amp; Pork Sausage</p>",
                    "field_summary": "Product may be  contaminated with <b>Listeria</b>.",
                    "field_recall_number": "045-2026",
                    "field_recall_classification": "Class I",
                    "field_recall_date": "2026-10-10",
                    "field_states": "California, Nevada",
                },
            )
        )

        assert alert.external_id == "045-2026"
        assert alert.title == "Acme Meats Recalls Beef & Pork Sausage"
        assert alert.summary == "Product may be contaminated with Listeria ."
        assert alert.severity == "High"
        assert alert.product_types == ["Beef", "Pork"]
        assert alert.locations == ["California", "Nevada"]
        assert alert.category == "recall"

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Class I recall of chicken", "High"),
            ("Class II recall of chicken", "Medium"),
            ("Class III recall of chicken", "Low"),
            ("Serious adverse health consequences", "High"),
            ("Undeclared allergen: soy", "Medium"),
            ("Misbranding of labels", "Low"),
            ("Acme Foods Recalls Ready-To-Eat Chicken Products Due to Possible Listeria Contamination", "High"),
            ("Ground beef recalled for possible E. coli O157:H7", "High"),
            ("Salmonella found in chicken breasts", "High"),
        ],
    )
    def test_keyword_severity(self, text, expected):
        alert = map_fsis(FSISRecord(origin="api", payload={"field_title": text, "field_recall_number": "1"}))
        assert alert.severity == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Graham Farms chicken nuggets recalled", ["Poultry"]),
            ("Eggplant parmesan with beef", ["Beef"]),
            ("Pork sausages and liquid eggs", ["Pork", "Eggs"]),
        ],
    )
    def test_product_types_match_whole_words(self, text, expected):
        alert = map_fsis(FSISRecord(origin="api", payload={"field_title": text, "field_recall_number": "1"}))
        assert alert.product_types == expected

    def test_rss_item_recall_number_from_text(self):
        alert = map_fsis(
            FSISRecord(
                origin="rss",
                payload={
                    "title": "Turkey Products Recalled",
                    "description": "FSIS Recall 061-2026 announced for ready-to-eat turkey.",
                    "link": "https://www.fsis.usda.gov/recalls-alerts/turkey",
                    "guid": "https://www.fsis.usda.gov/node/1234",
                    "pubDate": "Fri, 09 Oct 2026 14:00:00 GMT",
                },
            )
        )

        assert alert.external_id == "061-2026"
        assert alert.link_url == "https://www.fsis.usda.gov/recalls-alerts/turkey"
        assert alert.product_types == ["Poultry"]
        assert alert.date_published == "2026-10-09T14:00:00+00:00"

    def test_rss_item_without_number_uses_guid(self):
        alert = map_fsis(FSISRecord(origin="rss", payload={"title": "Public Health Alert", "guid": "node/77"}))
        assert alert.external_id == "NODE/77"


class TestCDCMapper:
    """CDC outbreaks and advisories"""

    def test_active_outbreak(self):
        alert = map_cdc(
            CDCRecord(
                origin="outbreaks",
                kind="outbreak",
                payload={
                    "id": "ob-2026-14",
                    "pathogen": "E. coli O157:H7",
                    "investigation_start_date": "2026-10-02T00:00:00.000",
                    "investigation_status": "Active",
                    "states_affected": "CA, NV, CA",
                    "food_vehicle": "Romaine lettuce",
                },
            )
        )

        assert alert.category == "outbreak"
        assert alert.severity == "High"
        assert alert.title == "E. coli O157:H7"
        assert alert.locations == ["CA", "NV", "CA"]
        assert alert.product_types == ["Romaine lettuce"]
        assert alert.date_published.startswith("2026-10-02")

    def test_closed_outbreak(self):
        alert = map_cdc(
            CDCRecord(origin="outbreaks", kind="outbreak", payload={"id": "ob-1", "investigation_status": "Closed"})
        )
        assert alert.severity == "Medium"
        assert alert.title == "CDC Outbreak Investigation"

    def test_advisory_without_pub_date_uses_now(self):
        before = datetime.now(timezone.utc)
        alert = map_cdc(
            CDCRecord(origin="mmwr", kind="advisory", payload={"title": "Weekly Report", "guid": "mmwr-77"})
        )

        published = datetime.fromisoformat(alert.date_published)
        assert published >= before.replace(microsecond=0)
        assert alert.category == "advisory"
        assert alert.severity == "Medium"

    def test_advisory_hash_ignores_fallback_date(self):
        record = CDCRecord(origin="mmwr", kind="advisory", payload={"title": "Weekly Report", "guid": "mmwr-77"})
        assert map_cdc(record).hash == map_cdc(record).hash

    @pytest.mark.parametrize("word", ["outbreak", "emergency", "deaths"])
    def test_advisory_escalation(self, word):
        alert = map_cdc(
            CDCRecord(origin="eid", kind="advisory", payload={"title": f"Multistate {word} update", "guid": "x"})
        )
        assert alert.severity == "High"


class TestEPAMapper:
    """ECHO enforcement cases"""

    @pytest.mark.parametrize(
        "payload,expected",
        [
            ({"FedPenaltyAssessed": "1500000"}, "Critical"),
            ({"FedPenaltyAssessed": "$250,000"}, "High"),
            ({"FedPenaltyAssessed": "50000"}, "Medium"),
            ({"FedPenaltyAssessed": "10000"}, "Low"),
            ({"TotalPenalty": "2,000,000"}, "Critical"),
            ({"FedPenaltyAssessed": "n/a"}, "Low"),
            ({}, "Low"),
        ],
    )
    def test_penalty_tiers(self, payload, expected):
        alert = map_epa(EPARecord(origin="enforcement", payload={"CaseNumber": "01-2026-0001", **payload}))
        assert alert.severity == expected

    def test_fields(self):
        alert = map_epa(
            EPARecord(
                origin="enforcement",
                payload={
                    "CaseNumber": "06-2026-3301",
                    "ActivityId": "3600412",
                    "DefendantEntity": "Gulf Refining LLC",
                    "FedPenaltyAssessed": "120000",
                    "Statutes": "CAA, CWA",
                    "StateCode": "TX",
                    "SettlementDate": "09/30/2026",
                },
            )
        )

        assert alert.title == "EPA Enforcement: Gulf Refining LLC"
        assert alert.category == "enforcement"
        assert alert.product_types == ["Air", "Water"]
        assert alert.locations == ["TX"]
        assert "Penalty: $120,000." in alert.summary
        assert alert.link_url == "https://echo.epa.gov/enforcement-case-report?id=3600412"
        assert alert.date_published == "2026-09-30T00:00:00+00:00"


class TestDocumentMappers:
    """Federal Register and Regulations.gov"""

    @pytest.mark.parametrize(
        "doc_type,category,severity",
        [
            ("Rule", "rule", "High"),
            ("Proposed Rule", "proposed_rule", "Medium"),
            ("Notice", "notice", "Low"),
            (None, "notice", "Low"),
        ],
    )
    def test_federal_register_types(self, doc_type, category, severity):
        alert = map_federal_register(
            FederalRegisterRecord(
                origin="documents",
                payload={
                    "document_number": "2026-21001",
                    "title": "Food Traceability",
                    "type": doc_type,
                    "publication_date": "2026-10-05",
                    "agencies": [{"name": "Food and Drug Administration"}],
                    "html_url": "https://www.federalregister.gov/d/2026-21001",
                },
            )
        )

        assert alert.category == category
        assert alert.severity == severity
        assert alert.product_types == ["Food and Drug Administration"]

    def test_regulations_gov(self):
        alert = map_regulations_gov(
            RegulationsGovRecord(
                origin="documents",
                payload={
                    "id": "FDA-2026-N-0101-0001",
                    "attributes": {
                        "documentType": "Proposed Rule",
                        "title": "Front-of-Package Labeling",
                        "postedDate": "2026-10-01T04:00:00Z",
                        "agencyId": "FDA",
                    },
                },
            )
        )

        assert alert.external_id == "FDA-2026-N-0101-0001"
        assert alert.category == "proposed_rule"
        assert alert.severity == "Medium"
        assert alert.link_url == "https://www.regulations.gov/document/FDA-2026-N-0101-0001"
        assert alert.date_published == "2026-10-01T04:00:00+00:00"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"type": 3},
            {"type": ["Rule"]},
            {"agencies": 5},
            {"agencies": ["FDA", None]},
            {"html_url": 42},
        ],
    )
    def test_federal_register_malformed_fields(self, overrides):
        payload = {"document_number": "2026-21002", "title": "Notice of Meeting", **overrides}
        alert = map_federal_register(FederalRegisterRecord(origin="documents", payload=payload))

        assert alert.external_id == "2026-21002"
        assert alert.category == "notice"
        assert alert.severity == "Low"
        assert alert.product_types == []
        assert alert.link_url is None

    @pytest.mark.parametrize("attributes", [["oops"], "oops", 7, None])
    def test_regulations_gov_malformed_attributes(self, attributes):
        alert = map_regulations_gov(
            RegulationsGovRecord(origin="documents", payload={"id": "EPA-HQ-2026-0002", "attributes": attributes})
        )

        assert alert.external_id == "EPA-HQ-2026-0002"
        assert alert.title == "Regulations.gov Document"
        assert alert.category == "notice"
        assert alert.severity == "Low"


class TestDispatch:
    def test_map_record_dispatches_on_source(self):
        alert = map_record(EPARecord(origin="enforcement", payload={"CaseNumber": "1"}))
        assert alert.source == "EPA"

    def test_unknown_record(self):
        with pytest.raises(ValueError):
            map_record(object())
