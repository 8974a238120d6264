"""Audit report serialization utilities."""

from datetime import datetime
from typing import Any, Dict, Iterable, List

from package_audit.app.models import PackageReport


def serialize_package_report(report: PackageReport) -> Dict[str, Any]:
    """
    Serialize one package's audit result.

    Args:
        report: PackageReport with the parent already attached

    Returns:
        JSON-serializable dict; ``introduced_via`` is None for requested roots
    """
    package = report.package
    return {
        "coordinates": package.coordinates,
        "purl": package.purl,
        "introduced_via": report.parent.coordinates if report.parent is not None else None,
        "audited": report.audited,
        "reference": report.reference,
        "vulnerabilities": [vuln.model_dump() for vuln in report.vulnerabilities],
    }


def serialize_audit_report(reports: Iterable[PackageReport]) -> Dict[str, Any]:
    """
    Serialize a complete audit run.

    Packages keep the order the audit service returned them in; the summary
    counts vulnerable packages and individual findings.

    Args:
        reports: Records returned by ``DependencyAuditor.run``

    Returns:
        Report dict ready for JSON output
    """
    packages: List[Dict[str, Any]] = [serialize_package_report(report) for report in reports]
    vulnerable = [item for item in packages if item["vulnerabilities"]]

    return {
        "generated_at": datetime.utcnow().isoformat(),
        "packages": packages,
        "summary": {
            "packages": len(packages),
            "vulnerable_packages": len(vulnerable),
            "vulnerabilities": sum(len(item["vulnerabilities"]) for item in vulnerable),
        },
    }
