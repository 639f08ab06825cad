"""
tests/test_validation.py
========================

Identifier patterns, required‑field policy and id generation.
"""

from dataclasses import replace
from datetime import date

import pytest

from itam.errors import ValidationError
from itam.models import Asset, AssetClass, AssetState, ClassCategory, Owner, Purchase
from itam.validation import (
    DEFAULT_REQUIRED_FIELDS,
    AssetValidator,
    RequiredFieldPolicy,
    category_for_class,
    check_identifiers,
    generate_asset_tag,
    generate_global_asset_id,
    resolve_path,
    validate_required_fields,
)


def test_complete_laptop_has_no_gaps(laptop):
    assert validate_required_fields(laptop) == []


def test_missing_paths_are_dotted(laptop):
    sparse = replace(laptop, purchase=Purchase(unit_cost=None, po="PO-1"), owner=None)
    assert validate_required_fields(sparse) == ["owner", "purchase.unit_cost", "purchase.invoice"]


def test_empty_string_counts_as_missing(laptop):
    assert validate_required_fields(replace(laptop, model="")) == ["model"]


def test_explicit_category_overrides_class(monitor):
    missing = validate_required_fields(monitor, ClassCategory.SAAS_LICENSE)
    assert missing == ["owner", "purchase.unit_cost", "purchase.order_date", "warranty.end"]


def test_unmapped_class_has_no_requirements():
    assert category_for_class(AssetClass.SERVER) is ClassCategory.OTHER
    assert validate_required_fields(Asset("AS-2025-000009", AssetClass.SERVER)) == []


def test_policy_is_read_only():
    with pytest.raises(TypeError):
        DEFAULT_REQUIRED_FIELDS.fields[ClassCategory.OTHER] = ("model",)


def test_custom_policy_is_injected(monitor):
    policy = RequiredFieldPolicy({ClassCategory.PERIPHERAL: ("serial_number",)})
    assert AssetValidator(policy).missing_fields(monitor) == ["serial_number"]
    # the shared default is unaffected
    assert AssetValidator().missing_fields(monitor) == ["purchase.unit_cost", "location"]


def test_resolve_path_walks_mappings(laptop):
    assert resolve_path(laptop, "device_guids.intune") == "b1c2d3"
    assert resolve_path(laptop, "warranty.end") == date(2028, 1, 10)
    assert resolve_path(replace(laptop, warranty=None), "warranty.end") is None


@pytest.mark.parametrize(
    "field, value",
    [
        ("global_asset_id", "AS-25-000001"),
        ("asset_tag", "lon-it-00001"),
        ("asset_tag", "LONDON-IT-00001"),
        ("serial_number", "abc"),
    ],
)
def test_bad_identifiers_name_the_field(laptop, field, value):
    with pytest.raises(ValidationError) as err:
        check_identifiers(replace(laptop, **{field: value}))
    assert err.value.field == field


def test_bad_upn_rejected(laptop):
    with pytest.raises(ValidationError) as err:
        check_identifiers(replace(laptop, owner=Owner("u-1", "not-an-email")))
    assert err.value.field == "owner.upn"


def test_absent_optional_identifiers_pass():
    check_identifiers(Asset("AS-2025-000001", AssetClass.DOCK))


def test_validator_report(monitor):
    report = AssetValidator().validate(replace(monitor, state=AssetState.IN_SERVICE, serial_number="bad"))
    assert not report.valid
    data = report.to_dict()
    assert data["missing_fields"] == ["purchase.unit_cost", "location"]
    assert {e["field"] for e in data["errors"]} == {"serial_number", "purchase.unit_cost", "location"}
    assert "asset is in service but has no owner assigned" in data["warnings"]


def test_generate_global_asset_id():
    assert generate_global_asset_id(123, year=2025) == "AS-2025-000123"
    with pytest.raises(ValueError):
        generate_global_asset_id(1_000_000)


def test_generate_asset_tag_is_valid():
    tag = generate_asset_tag("lon", "it", 7)
    assert tag == "LON-IT-00007"
    check_identifiers(Asset("AS-2025-000001", AssetClass.DOCK, asset_tag=tag))
