"""
ScopeGate Compliance Considerations

Plain-language guidance per enabled compliance standard, derived from the
scope answers. Each standard contributes an ordered list; a standard with
nothing specific to say falls back to a single generic line.
"""
from __future__ import annotations

from typing import Callable

from ..models import (
    AccessModel,
    ComplianceStandard,
    DataCategory,
    DeliveryType,
    ScopeAnswers,
)


_VALIDATED_DELIVERIES = {DeliveryType.NEW_PRODUCT, DeliveryType.FUNCTIONAL_EVOLUTION}
_CHANGE_DELIVERIES = {
    DeliveryType.FUNCTIONAL_EVOLUTION,
    DeliveryType.VISUAL_UX_ADJUSTMENT,
    DeliveryType.TECHNICAL_BUGFIX,
}


def iso9001_considerations(scope: ScopeAnswers) -> list[str]:
    """Quality management considerations."""
    items = ["Document design processes and decisions traceably (ISO 9001: 7.5)"]

    if scope.delivery_type in _VALIDATED_DELIVERIES:
        items.append("Validate requirements with stakeholders before starting design (ISO 9001: 8.2.3)")
    if scope.has_approval_action:
        items.append("Implement a documented review and approval process (ISO 9001: 8.3.4)")
    if scope.delivery_type in _CHANGE_DELIVERIES:
        items.append("Control design changes with impact analysis (ISO 9001: 8.3.6)")

    if len(items) == 1:
        items.append("Ensure traceability and quality in design deliverables")
    return items


def iso27001_considerations(scope: ScopeAnswers) -> list[str]:
    """Information security considerations."""
    items = []

    if scope.has_data:
        items.append("Classify information assets and apply appropriate controls (ISO 27001: A.8.2)")
    if scope.access_model == AccessModel.PUBLIC:
        items.append("Implement public access controls with authentication where needed (ISO 27001: A.9.1)")
    if scope.has_delete_action or scope.has_irreversible_action:
        items.append("Implement audit logs for critical actions (ISO 27001: A.12.4)")
    if scope.has_share_action or scope.has_export_action:
        items.append("Control information transfer and prevent leaks (ISO 27001: A.13.2)")
    if scope.has_financial:
        items.append("Apply cryptographic controls to financial data (ISO 27001: A.10)")
    if scope.data_involved is not None and scope.data_involved.is_sensitive:
        items.append("Protect sensitive data at rest and in transit (ISO 27001: A.8.2.3)")

    if not items:
        items.append("Apply information security principles in the design")
    return items


def iso27701_considerations(scope: ScopeAnswers) -> list[str]:
    """Privacy information management considerations."""
    items = []

    if scope.data_involved is not None and scope.data_involved.is_personal:
        items.append("Apply Privacy by Design from the start (ISO 27701: 6.1.1)")
        items.append("Minimize personal data collection to what is strictly necessary (ISO 27701: 7.2.2)")
    if scope.data_involved in (DataCategory.PERSONAL_SENSITIVE, DataCategory.CHILDREN):
        items.append("Obtain explicit consent to process sensitive data (ISO 27701: 7.3.2)")
        items.append("Implement strict controls for sensitive data (ISO 27701: 7.2.8)")
    if scope.has_delete_action and scope.has_data:
        items.append("Guarantee the right to erasure of personal data (ISO 27701: 7.3.4)")
    if scope.has_export_action and scope.has_data:
        items.append("Implement data portability in a structured format (ISO 27701: 7.3.5)")
    if scope.has_share_action and scope.has_data:
        items.append("Obtain consent before sharing personal data (ISO 27701: 7.3.3)")
        items.append("Document data transfers to third parties (ISO 27701: 7.5.1)")
    if scope.access_model == AccessModel.PUBLIC and scope.has_data:
        items.append("Clearly inform users about data collection and use (ISO 27701: 7.3.1)")
    if scope.has_data:
        items.append("Implement transparency and data subject control mechanisms (ISO 27701: 7.3)")

    if not items:
        items.append("Apply privacy principles in the design")
    return items


CONSIDERATION_BUILDERS: dict[ComplianceStandard, Callable[[ScopeAnswers], list[str]]] = {
    ComplianceStandard.ISO_9001: iso9001_considerations,
    ComplianceStandard.ISO_27001: iso27001_considerations,
    ComplianceStandard.ISO_27701: iso27701_considerations,
}


def compliance_considerations(scope: ScopeAnswers) -> dict[ComplianceStandard, list[str]]:
    """
    Considerations for every standard toggled on in the scope.

    Args:
        scope: The scope answers

    Returns:
        Mapping of enabled standard to its considerations, in canonical
        standard order
    """
    return {
        standard: CONSIDERATION_BUILDERS[standard](scope)
        for standard in scope.enabled_standards
    }
