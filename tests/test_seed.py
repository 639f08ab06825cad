"""
tests/test_seed.py
==================

The demo seed walks every asset through the registry, so it doubles as
an end‑to‑end check of the life‑cycle rules.
"""

from itam.inventory import AssetRegistry, LicenseRegistry
from itam.models import ComplianceStatus, LicenseStatus
from seed_database import SAMPLE_ASSETS, SAMPLE_LICENSES, seed_database


def test_seed_into_memory(capsys):
    assets, licenses = AssetRegistry(), LicenseRegistry()
    seed_database(assets, licenses)

    counts = assets.state_counts()
    assert sum(counts.values()) == len(SAMPLE_ASSETS)
    assert counts["In Service"] == 1
    assert counts["In Repair"] == 1
    assert counts["Disposed"] == 1

    by_name = {lic.name: lic for lic in licenses}
    assert len(by_name) == len(SAMPLE_LICENSES)
    assert by_name["Windows Server 2022"].compliance_status is ComplianceStatus.NON_COMPLIANT
    assert by_name["Adobe Creative Cloud"].status is LicenseStatus.EXPIRING
    assert by_name["Zoom Business"].status is LicenseStatus.EXPIRED
    assert by_name["Legacy CRM"].status is LicenseStatus.CANCELLED
