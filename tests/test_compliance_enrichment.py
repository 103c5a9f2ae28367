"""
Tests for compliance tables and enrichment.

Validates:
- References join on the stable work item key, not position
- Legacy positional entries are translated to keys at load time
- Lookups for missing sessions, items or columns are empty
- Malformed sections and entries are dropped, or rejected when strict
"""
import pytest

from scopegate.engine import ComplianceEnrichment
from scopegate.exceptions import PackValidationError
from scopegate.models import ComplianceStandard, ReferenceColumn
from scopegate.packs import PackLoader, load_compliance_pack_from_string

from tests.conftest import make_catalog, make_session


CLAUSES = {
    "schema_version": "1.0.0",
    "work_item_compliance": {
        "01": [
            {"item": "first", "iso_9001_2015": ["4.1"], "iso_iec_27001_2022_annexA": ["A.5.1"]},
            {"item": "second", "iso_9001_2015": ["8.2"]},
        ],
    },
    "work_item_documentation": {
        "01": [
            {"item": "first", "document_types": ["PRD"]},
        ],
    },
}


@pytest.fixture
def catalog():
    return make_catalog(make_session("01", always_required=True, items=("first", "second")))


def load(data, catalog, strict=False):
    return PackLoader(strict_compliance=strict).load_compliance_data(data, catalog)


class TestKeyJoin:
    def test_enrich(self, catalog):
        enrichment = ComplianceEnrichment(load(CLAUSES, catalog), catalog)
        first, second = enrichment.enrich(catalog.get("01"))

        assert first.iso9001 == ("4.1",)
        assert first.iso27001_annex_a == ("A.5.1",)
        assert first.iso27701 == ()
        assert first.document_types == ("PRD",)
        assert second.iso9001 == ("8.2",)
        assert second.document_types == ()

    def test_reordering_items_keeps_references(self, catalog):
        tables = load(CLAUSES, catalog)
        reordered = make_catalog(make_session("01", always_required=True, items=("second", "first")))
        enrichment = ComplianceEnrichment(tables, reordered)

        items = {w.key: w for w in enrichment.enrich(reordered.get("01"))}

        assert items["first"].iso9001 == ("4.1",)
        assert items["second"].iso9001 == ("8.2",)

    def test_lookup_by_key(self, catalog):
        enrichment = ComplianceEnrichment(load(CLAUSES, catalog), catalog)
        assert enrichment.lookup_item("01", "first", ReferenceColumn.ISO_9001) == ("4.1",)
        assert enrichment.lookup_item("01", "first", "iso_iec_27001_2022_annexA") == ("A.5.1",)

    def test_lookup_by_position(self, catalog):
        enrichment = ComplianceEnrichment(load(CLAUSES, catalog), catalog)
        assert enrichment.lookup("01", 1, ReferenceColumn.ISO_9001) == ("8.2",)
        assert enrichment.document_types("01", 0) == ("PRD",)

    @pytest.mark.parametrize("session_id,index", [
        ("01", 5),
        ("99", 0),
    ])
    def test_missing_position(self, catalog, session_id, index):
        enrichment = ComplianceEnrichment(load(CLAUSES, catalog), catalog)
        assert enrichment.lookup(session_id, index, ReferenceColumn.ISO_9001) is None
        assert enrichment.document_types(session_id, index) is None

    def test_missing_item(self, catalog):
        enrichment = ComplianceEnrichment(load(CLAUSES, catalog), catalog)
        assert enrichment.lookup_item("01", "third", ReferenceColumn.ISO_9001) is None
        assert enrichment.document_types_for_item("01", "second") is None

    def test_position_without_catalog(self, catalog):
        enrichment = ComplianceEnrichment(load(CLAUSES, catalog))
        assert enrichment.lookup("01", 0, ReferenceColumn.ISO_9001) is None

    def test_lookup_by_standard(self, catalog):
        enrichment = ComplianceEnrichment(load(CLAUSES, catalog), catalog)
        assert enrichment.lookup("01", 0, ComplianceStandard.ISO_27001) == ("A.5.1",)
        assert enrichment.lookup("01", 0, "iso_iec_27001_2022") == ("A.5.1",)
        assert enrichment.lookup("01", 1, ComplianceStandard.ISO_9001) == ("8.2",)
        assert enrichment.lookup("01", 1, ComplianceStandard.ISO_27701) == ()

    def test_standard_joins_clauses_before_annex_a(self, catalog):
        tables = load({
            "work_item_compliance": {
                "01": [{
                    "item": "first",
                    "iso_iec_27001_2022_clauses": ["6.1.2"],
                    "iso_iec_27001_2022_annexA": ["A.8.25"],
                }],
            },
        }, catalog)
        enrichment = ComplianceEnrichment(tables, catalog)
        assert enrichment.lookup_item("01", "first", ComplianceStandard.ISO_27001) == ("6.1.2", "A.8.25")

    @pytest.mark.parametrize("column", ["iso_14001", "", 7])
    def test_unknown_column_is_none(self, catalog, column):
        enrichment = ComplianceEnrichment(load(CLAUSES, catalog), catalog)
        assert enrichment.lookup("01", 0, column) is None
        assert enrichment.lookup_item("01", "first", column) is None

    def test_default_tables_are_not_shared(self):
        first, second = ComplianceEnrichment(), ComplianceEnrichment()
        first.tables.documents["01"] = {"first": ("PRD",)}
        assert second.tables.documents == {}

    def test_empty_tables(self, catalog):
        items = ComplianceEnrichment().enrich(catalog.get("01"))
        assert [w.key for w in items] == ["first", "second"]
        assert not any(w.has_references for w in items)


class TestLegacyIndex:
    def test_index_translated_to_key(self, catalog):
        data = {"work_item_compliance": {"01": [{"index": 1, "iso_9001_2015": ["9.1"]}]}}
        tables = load(data, catalog)
        assert tables.clause_row("01", "second")[ReferenceColumn.ISO_9001] == ("9.1",)

    def test_integer_session_keys(self, catalog):
        tables = load_compliance_pack_from_string(
            "work_item_documentation:\n  1:\n    - {index: 0, document_types: [ADR]}\n",
            catalog,
        )
        assert tables.document_row("01", "first") == ("ADR",)

    def test_index_out_of_range_dropped(self, catalog, caplog):
        data = {"work_item_compliance": {"01": [{"index": 7, "iso_9001_2015": ["9.1"]}]}}
        tables = load(data, catalog)
        assert tables.entry_count == 0
        assert "no work item at index 7" in caplog.text

    def test_index_out_of_range_strict(self, catalog):
        data = {"work_item_compliance": {"01": [{"index": 7}]}}
        with pytest.raises(PackValidationError):
            load(data, catalog, strict=True)


class TestMalformed:
    def test_mapping_section(self, catalog):
        data = {"work_item_compliance": {"01": {"second": {"iso_9001_2015": ["7.5"]}}}}
        tables = load(data, catalog)
        assert tables.clause_row("01", "second")[ReferenceColumn.ISO_9001] == ("7.5",)

    def test_scalar_section_ignored(self, catalog, caplog):
        data = {"work_item_compliance": {"01": "oops"}}
        assert load(data, catalog).entry_count == 0
        assert "neither a list nor a mapping" in caplog.text

    def test_non_list_column_is_empty(self, catalog):
        data = {"work_item_compliance": {"01": [{"item": "first", "iso_9001_2015": "4.1"}]}}
        row = load(data, catalog).clause_row("01", "first")
        assert row[ReferenceColumn.ISO_9001] == ()

    def test_entry_without_address_dropped(self, catalog):
        data = {"work_item_documentation": {"01": [{"document_types": ["PRD"]}]}}
        assert load(data, catalog).entry_count == 0

    def test_entry_without_address_strict(self, catalog):
        data = {"work_item_documentation": {"01": [{"document_types": ["PRD"]}]}}
        with pytest.raises(PackValidationError):
            load(data, catalog, strict=True)

    def test_unknown_item_key_dropped(self, catalog):
        data = {"work_item_compliance": {"01": [{"item": "nope", "iso_9001_2015": ["1"]}]}}
        assert load(data, catalog).entry_count == 0

    def test_unknown_session_strict(self, catalog):
        data = {"work_item_compliance": {"42": [{"item": "first"}]}}
        with pytest.raises(PackValidationError):
            load(data, catalog, strict=True)

    def test_table_not_a_mapping(self, catalog):
        assert load({"work_item_compliance": ["not", "a", "mapping"]}, catalog).entry_count == 0

    def test_empty_pack(self, catalog):
        assert load(None, catalog).entry_count == 0

    def test_keyed_entries_without_catalog(self):
        tables = PackLoader().load_compliance_data(CLAUSES)
        assert tables.clause_row("01", "first")[ReferenceColumn.ISO_9001] == ("4.1",)
