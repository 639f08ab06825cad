"""
itam.validation
===============

Identifier patterns and the required‑fields‑by‑class policy.

The policy is an immutable :class:`RequiredFieldPolicy` handed to an
:class:`AssetValidator` at construction time, so a deployment can ship
its own table without touching module state.  Field paths are dotted
attribute paths on :class:`itam.models.Asset` (``purchase.unit_cost``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import ValidationError
from .models import Asset, AssetClass, AssetState, ClassCategory

# ---------------------------------------------------------------------
# Identifier patterns
# ---------------------------------------------------------------------
SERIAL_NUMBER_RE = re.compile(r"^[A-Z0-9-]{6,20}$")
ASSET_TAG_RE = re.compile(r"^[A-Z]{2,5}-[A-Z0-9]{2,5}-\d{3,5}$")
GLOBAL_ASSET_ID_RE = re.compile(r"^AS-\d{4}-\d{6}$")
UPN_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

IDENTIFIER_PATTERNS: Mapping[str, "re.Pattern[str]"] = MappingProxyType({
    "global_asset_id": GLOBAL_ASSET_ID_RE,
    "asset_tag": ASSET_TAG_RE,
    "serial_number": SERIAL_NUMBER_RE,
})

_FORMAT_HINTS = {
    "global_asset_id": "expected AS-YYYY-NNNNNN",
    "asset_tag": "expected SITE-CAT-NNNNN",
    "serial_number": "expected 6-20 upper-case letters, digits or hyphens",
    "owner.upn": "expected an e-mail style principal name",
}

# ---------------------------------------------------------------------
# Class → category mapping
# ---------------------------------------------------------------------
_CATEGORY_BY_CLASS = MappingProxyType({
    AssetClass.LAPTOP: ClassCategory.END_USER_DEVICE,
    AssetClass.DESKTOP: ClassCategory.END_USER_DEVICE,
    AssetClass.PHONE: ClassCategory.END_USER_DEVICE,
    AssetClass.TABLET: ClassCategory.END_USER_DEVICE,
    AssetClass.MONITOR: ClassCategory.PERIPHERAL,
    AssetClass.DOCK: ClassCategory.PERIPHERAL,
    AssetClass.KEYBOARD: ClassCategory.PERIPHERAL,
    AssetClass.MOUSE: ClassCategory.PERIPHERAL,
    AssetClass.HEADSET: ClassCategory.PERIPHERAL,
    AssetClass.WEBCAM: ClassCategory.PERIPHERAL,
    AssetClass.ACCESSORY: ClassCategory.PERIPHERAL,
})


def category_for_class(asset_class: AssetClass) -> ClassCategory:
    """Map an asset class to its policy category (``OTHER`` if unmapped)."""
    return _CATEGORY_BY_CLASS.get(asset_class, ClassCategory.OTHER)


# ---------------------------------------------------------------------
# Required‑field policy
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class RequiredFieldPolicy:
    """Read‑only mapping of category → required dotted field paths."""

    fields: Mapping[ClassCategory, Tuple[str, ...]]

    def __post_init__(self) -> None:
        frozen = {ClassCategory(k): tuple(v) for k, v in dict(self.fields).items()}
        object.__setattr__(self, "fields", MappingProxyType(frozen))

    def required_for(self, category: ClassCategory) -> Tuple[str, ...]:
        return self.fields.get(category, ())


DEFAULT_REQUIRED_FIELDS = RequiredFieldPolicy({
    ClassCategory.END_USER_DEVICE: (
        "model",
        "serial_number",
        "owner",
        "purchase.unit_cost",
        "purchase.po",
        "purchase.invoice",
        "warranty.start",
        "warranty.end",
        "location",
        "state",
        "device_guids",
    ),
    ClassCategory.PERIPHERAL: (
        "model",
        "purchase.unit_cost",
        "location",
    ),
    ClassCategory.SAAS_LICENSE: (
        "model",               # application name
        "owner",
        "purchase.unit_cost",
        "purchase.order_date",
        "warranty.end",        # renewal date
    ),
})


def resolve_path(obj: Any, path: str) -> Any:
    """Follow a dotted attribute (or mapping key) path; ``None`` if any hop is missing."""
    current = obj
    for part in path.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def validate_required_fields(
    asset: Asset,
    category: Optional[ClassCategory] = None,
    policy: RequiredFieldPolicy = DEFAULT_REQUIRED_FIELDS,
) -> List[str]:
    """
    Return the dotted paths required for *category* that *asset* lacks.

    When *category* is omitted it is derived from ``asset.asset_class``.
    """
    category = category or category_for_class(asset.asset_class)
    return [p for p in policy.required_for(category) if _is_missing(resolve_path(asset, p))]


def check_identifiers(asset: Asset) -> None:
    """Raise :class:`ValidationError` for the first malformed identifier."""
    errors = identifier_errors(asset)
    if errors:
        raise errors[0]


def identifier_errors(asset: Asset) -> List[ValidationError]:
    errors: List[ValidationError] = []
    if not asset.global_asset_id:
        errors.append(ValidationError("global_asset_id", "global_asset_id is required"))
    for name, pattern in IDENTIFIER_PATTERNS.items():
        value = getattr(asset, name)
        if value and not pattern.match(value):
            errors.append(ValidationError(name, f"{name} format is invalid ({_FORMAT_HINTS[name]})"))
    if asset.owner is not None and asset.owner.upn and not UPN_RE.match(asset.owner.upn):
        errors.append(ValidationError("owner.upn", f"owner.upn format is invalid ({_FORMAT_HINTS['owner.upn']})"))
    return errors


# ---------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------
@dataclass
class ValidationReport:
    errors: List[ValidationError] = field(default_factory=list)
    missing_fields: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [{"field": e.field, "message": str(e)} for e in self.errors],
            "missing_fields": list(self.missing_fields),
            "warnings": list(self.warnings),
        }


class AssetValidator:
    """
    Full asset check: identifier patterns, class‑required fields and
    non‑blocking warnings.

    Example
    -------
    >>> v = AssetValidator()
    >>> v.validate(Asset("AS-2025-000123", AssetClass.MONITOR)).missing_fields
    ['model', 'purchase.unit_cost', 'location']
    """

    def __init__(self, policy: RequiredFieldPolicy = DEFAULT_REQUIRED_FIELDS) -> None:
        self.policy = policy

    def missing_fields(self, asset: Asset, category: Optional[ClassCategory] = None) -> List[str]:
        return validate_required_fields(asset, category, self.policy)

    def validate(self, asset: Asset, category: Optional[ClassCategory] = None) -> ValidationReport:
        report = ValidationReport(errors=identifier_errors(asset))
        report.missing_fields = self.missing_fields(asset, category)
        for path in report.missing_fields:
            report.errors.append(ValidationError(path, f"required field {path} is missing"))
        report.warnings.extend(self._warnings(asset))
        return report

    @staticmethod
    def _warnings(asset: Asset) -> Iterable[str]:
        if not asset.serial_number:
            yield "serial number is missing; warranty tracking may be affected"
        if resolve_path(asset, "purchase.unit_cost") is None:
            yield "purchase price is missing; depreciation cannot be calculated"
        if resolve_path(asset, "warranty.end") is None:
            yield "warranty end date is missing; compliance tracking is incomplete"
        if asset.state == AssetState.IN_SERVICE and asset.owner is None:
            yield "asset is in service but has no owner assigned"


# ---------------------------------------------------------------------
# Identifier generation
# ---------------------------------------------------------------------
def generate_global_asset_id(sequence: int, year: Optional[int] = None) -> str:
    """``AS-YYYY-NNNNNN`` for the given sequence number."""
    if not 0 <= sequence <= 999_999:
        raise ValueError("sequence must fit in six digits")
    year = year or date.today().year
    return f"AS-{year:04d}-{sequence:06d}"


def generate_asset_tag(site: str, category: str, sequence: int) -> str:
    """``SITE-CAT-NNNNN`` built from the first five characters of each part."""
    site_code = re.sub(r"\s+", "", site)[:5].upper()
    category_code = re.sub(r"\s+", "", category)[:5].upper()
    return f"{site_code}-{category_code}-{sequence:05d}"
