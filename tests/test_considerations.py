"""
Tests for per-standard compliance considerations.
"""
import pytest

from scopegate.engine import (
    compliance_considerations,
    iso9001_considerations,
    iso27001_considerations,
    iso27701_considerations,
)
from scopegate.models import ComplianceStandard, ScopeAnswers

from tests.conftest import make_scope


class TestEnabledStandards:
    def test_all_enabled_by_default(self):
        result = compliance_considerations(ScopeAnswers())
        assert list(result) == [
            ComplianceStandard.ISO_9001,
            ComplianceStandard.ISO_27001,
            ComplianceStandard.ISO_27701,
        ]

    def test_disabled_standard_omitted(self):
        scope = make_scope(complianceISO27701=False)
        assert ComplianceStandard.ISO_27701 not in compliance_considerations(scope)

    def test_all_disabled(self):
        scope = make_scope(complianceISO9001=False, complianceISO27001=False, complianceISO27701=False)
        assert compliance_considerations(scope) == {}


class TestIso9001:
    def test_generic_fallback(self):
        items = iso9001_considerations(ScopeAnswers())
        assert len(items) == 2
        assert "7.5" in items[0]

    def test_new_product(self):
        items = iso9001_considerations(make_scope(deliveryType="new-product"))
        assert any("8.2.3" in item for item in items)
        assert not any("8.3.6" in item for item in items)

    def test_functional_evolution_validates_and_controls_change(self):
        items = iso9001_considerations(make_scope(deliveryType="functional-evolution"))
        assert any("8.2.3" in item for item in items)
        assert any("8.3.6" in item for item in items)

    def test_approval(self):
        assert any("8.3.4" in item for item in iso9001_considerations(make_scope(hasApprovalAction=True)))


class TestIso27001:
    def test_generic_fallback(self):
        assert iso27001_considerations(ScopeAnswers()) == [
            "Apply information security principles in the design"
        ]

    def test_no_data_is_not_data(self):
        items = iso27001_considerations(make_scope(dataInvolved="none"))
        assert not any("A.8.2)" in item for item in items)

    def test_sensitive_data(self):
        items = iso27001_considerations(make_scope(dataInvolved="financial", hasFinancial=True))
        assert any("A.8.2)" in item for item in items)
        assert any("A.10" in item for item in items)
        assert any("A.8.2.3" in item for item in items)

    @pytest.mark.parametrize("flag,clause", [
        ("hasDeleteAction", "A.12.4"),
        ("hasIrreversibleAction", "A.12.4"),
        ("hasShareAction", "A.13.2"),
        ("hasExportAction", "A.13.2"),
    ])
    def test_actions(self, flag, clause):
        assert any(clause in item for item in iso27001_considerations(make_scope(**{flag: True})))


class TestIso27701:
    def test_generic_fallback(self):
        assert iso27701_considerations(ScopeAnswers()) == ["Apply privacy principles in the design"]

    def test_non_personal_data_gets_transparency_only(self):
        items = iso27701_considerations(make_scope(dataInvolved="non-personal"))
        assert len(items) == 1
        assert "7.3)" in items[0]

    def test_children_data(self):
        items = iso27701_considerations(make_scope(dataInvolved="children"))
        assert any("6.1.1" in item for item in items)
        assert any("7.3.2" in item for item in items)

    def test_sharing_with_data(self):
        items = iso27701_considerations(make_scope(dataInvolved="personal-common", hasShareAction=True))
        assert any("7.3.3" in item for item in items)
        assert any("7.5.1" in item for item in items)

    def test_delete_without_data(self):
        items = iso27701_considerations(make_scope(dataInvolved="none", hasDeleteAction=True))
        assert not any("7.3.4" in item for item in items)
