"""
POD 1.1 Validator: business rules over a fully constructed entity tree.

Validation is a pure pass: it never modifies the entities, and running
it twice on unchanged input yields the same report. Every failed rule
adds one diagnostic; nothing stops at the first failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from odcat.coercion import BUREAU_CODE_RE, PROGRAM_CODE_RE, is_valid_email
from odcat.diagnostics import Diagnostic, DiagnosticKind, validation_error
from odcat.model import AccessLevel, Catalog, Contact, Dataset, Distribution, Publisher


@dataclass
class ValidationReport:
    """Outcome of validating one entity."""

    subject: Optional[str] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.diagnostics

    def fail(self, message: str, field_name: Optional[str] = None) -> None:
        self.diagnostics.append(validation_error(message, field_name))

    def absorb(self, other: ValidationReport) -> None:
        self.diagnostics.extend(other.diagnostics)

    def messages(self) -> List[str]:
        return [str(d) for d in self.diagnostics]


def validate_contact(contact: Contact) -> ValidationReport:
    report = ValidationReport(subject="contactPoint")
    if not contact.full_name:
        report.fail("Contact Point invalid: Full Name is required", "contactPoint")
    if not contact.email_address:
        report.fail("Contact Point invalid: Email Address is required", "contactPoint")
    elif not is_valid_email(contact.email_address):
        report.fail(f"Contact Point invalid: Email Address is not valid: {contact.email_address}", "contactPoint")
    return report


def validate_publisher(publisher: Publisher, _depth: int = 0) -> ValidationReport:
    """Publisher needs a name; an attached sub-organization is checked on its own."""
    report = ValidationReport(subject="publisher")
    label = "Publisher" if _depth == 0 else "Sub-organization"
    if not publisher.name:
        report.fail(f"{label} invalid: Name is required", "publisher")
    if publisher.sub_organization is not None:
        if _depth >= 1:
            report.fail("Publisher invalid: only one level of sub-organization is supported", "publisher")
        else:
            report.absorb(validate_publisher(publisher.sub_organization, _depth + 1))
    return report


def validate_distribution(distribution: Distribution, access_level: Optional[str]) -> ValidationReport:
    """Public and restricted distributions must expose an access or download URL."""
    report = ValidationReport(subject=distribution.title)
    if access_level in (AccessLevel.PUBLIC.value, AccessLevel.RESTRICTED.value):
        if distribution.usable_url is None:
            name = distribution.title or "untitled"
            report.fail(
                f"Distribution '{name}' requires an accessURL or downloadURL when dataset is public or restricted.",
                "distribution",
            )
    return report


def validate_dataset(dataset: Dataset) -> ValidationReport:
    """
    Check a dataset against POD 1.1 required-field rules.

    Checks:
    - title, description, modified, identifier present
    - at least one keyword
    - publisher and contact point valid
    - access level present and canonical
    - distributions present (and usable) unless non-public
    - bureau and program codes present and well-formed

    Returns a ValidationReport; report.valid is True only if every rule passed.
    """
    report = ValidationReport(subject=dataset.label)

    if not dataset.title:
        report.fail("Title is required.", "title")
    if not dataset.description:
        report.fail("Description is required.", "description")
    if not dataset.keywords:
        report.fail("At least one tag is required.", "keyword")
    if dataset.modified is None:
        report.fail("Modified is required.", "modified")

    report.absorb(validate_publisher(dataset.publisher))
    report.absorb(validate_contact(dataset.contact_point))

    if not dataset.unique_identifier:
        report.fail("Identifier is required.", "identifier")

    if dataset.access_level is None:
        report.fail("Access Level is required.", "accessLevel")
    elif dataset.access_level not in AccessLevel.values():
        report.fail(
            f"Access Level must equal {', '.join(AccessLevel.values())}: {dataset.access_level}",
            "accessLevel",
        )
    elif dataset.access_level != AccessLevel.NON_PUBLIC.value and not dataset.distributions:
        report.fail("At least one distribution is required when dataset is public or restricted.", "distribution")

    for distribution in dataset.distributions:
        report.absorb(validate_distribution(distribution, dataset.access_level))

    if not dataset.bureau_codes:
        report.fail("Bureau Code is required.", "bureauCode")
    for code in dataset.bureau_codes:
        if not BUREAU_CODE_RE.match(code):
            report.fail(f"Bureau Code must be \\d{{3}}:\\d{{2}}: {code}", "bureauCode")

    if not dataset.program_codes:
        report.fail("Program Code is required.", "programCode")
    for code in dataset.program_codes:
        if not PROGRAM_CODE_RE.match(code):
            report.fail(f"Program Code must be \\d{{3}}:\\d{{3}}: {code}", "programCode")

    return report


def validate_unique_identifiers(catalog: Catalog) -> ValidationReport:
    """
    Pairwise scan for duplicate identifiers.

    One diagnostic per duplicate pair, so three datasets sharing an
    identifier produce three diagnostics. Datasets without an identifier
    are skipped here (validate_dataset reports them).
    """
    report = ValidationReport(subject="catalog")
    datasets = catalog.datasets
    for i in range(len(datasets)):
        identifier = datasets[i].unique_identifier
        if identifier is None:
            continue
        for k in range(i + 1, len(datasets)):
            if datasets[k].unique_identifier == identifier:
                report.diagnostics.append(Diagnostic(
                    DiagnosticKind.DUPLICATE_IDENTIFIER,
                    f"Invalid catalog: non-unique identifier: {identifier}",
                    "identifier",
                ))
    return report


def validate_catalog(catalog: Catalog) -> ValidationReport:
    """Every dataset's report (tagged with its label) plus the uniqueness scan."""
    report = ValidationReport(subject="catalog")
    for dataset in catalog.datasets:
        dataset_report = validate_dataset(dataset)
        report.diagnostics.extend(d.tagged(dataset.label) for d in dataset_report.diagnostics)
    report.absorb(validate_unique_identifiers(catalog))
    return report


__all__ = [
    "ValidationReport",
    "validate_contact",
    "validate_publisher",
    "validate_distribution",
    "validate_dataset",
    "validate_unique_identifiers",
    "validate_catalog",
]
