"""
VAT/Tax Number Format Validation
================================

Validates VAT and tax registration numbers for the UK, EU member states and
a handful of other markets. This is format validation only: numbers are never
checked against VIES, HMRC or any other government API, and callers rely on
validation being local and synchronous.

Validation Steps:
-----------------
1. Reject empty input ("VAT number is required")
2. Normalize: trim, remove all whitespace, uppercase
3. Reject anything shorter than 4 characters
4. Use the first two characters as the country code
5. Known country: the whole number must match that country's pattern
6. Unknown country: accept 2 letters followed by 4-20 alphanumerics

Usage:
------
    from kitchen_shop.services.vat import validate_vat_number, format_vat_number

    result = validate_vat_number("gb 123 456 789")
    result.is_valid   # True
    result.country    # "GB"

    format_vat_number("GB123456789")  # "GB 123 456 789"
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern

# Country code -> full-string pattern for the normalized (no spaces, uppercase) number
VAT_PATTERNS: Dict[str, Pattern[str]] = {
    # UK: GB followed by 9 or 12 digits, or government department / health authority
    "GB": re.compile(r"^GB\d{9}$|^GB\d{12}$|^GBGD\d{3}$|^GBHA\d{3}$", re.ASCII),

    # EU member states
    "AT": re.compile(r"^ATU\d{8}$", re.ASCII),  # Austria
    "BE": re.compile(r"^BE0\d{9}$", re.ASCII),  # Belgium
    "BG": re.compile(r"^BG\d{9,10}$", re.ASCII),  # Bulgaria
    "CY": re.compile(r"^CY\d{8}[A-Z]$", re.ASCII),  # Cyprus
    "CZ": re.compile(r"^CZ\d{8,10}$", re.ASCII),  # Czech Republic
    "DE": re.compile(r"^DE\d{9}$", re.ASCII),  # Germany
    "DK": re.compile(r"^DK\d{8}$", re.ASCII),  # Denmark
    "EE": re.compile(r"^EE\d{9}$", re.ASCII),  # Estonia
    "ES": re.compile(r"^ES[A-Z0-9]\d{7}[A-Z0-9]$", re.ASCII),  # Spain
    "FI": re.compile(r"^FI\d{8}$", re.ASCII),  # Finland
    "FR": re.compile(r"^FR[A-HJ-NP-Z0-9]{2}\d{9}$", re.ASCII),  # France
    "GR": re.compile(r"^GR\d{9}$|^EL\d{9}$", re.ASCII),  # Greece
    "HR": re.compile(r"^HR\d{11}$", re.ASCII),  # Croatia
    "HU": re.compile(r"^HU\d{8}$", re.ASCII),  # Hungary
    "IE": re.compile(r"^IE\d[A-Z0-9]\d{5}[A-Z]$|^IE\d{7}[A-WY][A-I]$", re.ASCII),  # Ireland
    "IT": re.compile(r"^IT\d{11}$", re.ASCII),  # Italy
    "LT": re.compile(r"^LT(\d{9}|\d{12})$", re.ASCII),  # Lithuania
    "LU": re.compile(r"^LU\d{8}$", re.ASCII),  # Luxembourg
    "LV": re.compile(r"^LV\d{11}$", re.ASCII),  # Latvia
    "MT": re.compile(r"^MT\d{8}$", re.ASCII),  # Malta
    "NL": re.compile(r"^NL\d{9}B\d{2}$", re.ASCII),  # Netherlands
    "PL": re.compile(r"^PL\d{10}$", re.ASCII),  # Poland
    "PT": re.compile(r"^PT\d{9}$", re.ASCII),  # Portugal
    "RO": re.compile(r"^RO\d{2,10}$", re.ASCII),  # Romania
    "SE": re.compile(r"^SE\d{12}$", re.ASCII),  # Sweden
    "SI": re.compile(r"^SI\d{8}$", re.ASCII),  # Slovenia
    "SK": re.compile(r"^SK\d{10}$", re.ASCII),  # Slovakia

    # Other markets (common formats)
    "US": re.compile(r"^\d{2}-\d{7}$", re.ASCII),  # US EIN
    "CA": re.compile(r"^\d{9}(RT\d{4})?$", re.ASCII),  # Canada BN
    "AU": re.compile(r"^\d{11}$", re.ASCII),  # Australian ABN
    "NZ": re.compile(r"^\d{8,9}$", re.ASCII),  # New Zealand GST
    "CH": re.compile(r"^CHE-\d{3}\.\d{3}\.\d{3}( TVA| MWST| IVA)?$", re.ASCII),  # Switzerland
    "NO": re.compile(r"^NO\d{9}MVA$", re.ASCII),  # Norway
}

# Two letters followed by 4-20 alphanumerics, for countries without a pattern
FALLBACK_PATTERN = re.compile(r"^[A-Z]{2}[A-Z0-9]{4,20}$", re.ASCII)

_WHITESPACE = re.compile(r"\s")
_UK_FORMATTABLE = re.compile(r"^GB\d{9,12}$", re.ASCII)

MIN_VAT_LENGTH = 4


@dataclass
class VatValidationResult:
    """Result of a VAT number format check."""

    is_valid: bool
    country: Optional[str] = None
    error: Optional[str] = None


def normalize_vat_number(vat_number: str) -> str:
    """Trim, strip internal whitespace and uppercase."""
    return _WHITESPACE.sub("", (vat_number or "").strip()).upper()


def validate_vat_number(vat_number: Optional[str]) -> VatValidationResult:
    """
    Validate VAT/tax number format.

    Never raises: every failure comes back as an invalid result with a
    user-facing error message so the checkout form can show it inline.
    """
    if not vat_number or not vat_number.strip():
        return VatValidationResult(is_valid=False, error="VAT number is required")

    cleaned = normalize_vat_number(vat_number)

    if len(cleaned) < MIN_VAT_LENGTH:
        return VatValidationResult(is_valid=False, error="VAT number is too short")

    country_code = cleaned[:2]

    pattern = VAT_PATTERNS.get(country_code)
    if pattern is not None:
        if pattern.match(cleaned):
            return VatValidationResult(is_valid=True, country=country_code)
        return VatValidationResult(
            is_valid=False,
            error=f"Invalid {country_code} VAT number format",
        )

    if FALLBACK_PATTERN.match(cleaned):
        return VatValidationResult(is_valid=True, country=country_code)

    return VatValidationResult(
        is_valid=False,
        error="Invalid VAT number format. Should start with 2-letter country code.",
    )


def format_vat_number(vat_number: str) -> str:
    """
    Format a VAT number for display.

    UK numbers are grouped in threes ("GB 123 456 789"); everything else gets
    a single space after the two-letter prefix. Input is normalized first,
    so formatting an already formatted number gives the same result.
    """
    cleaned = normalize_vat_number(vat_number)
    if not cleaned:
        return ""

    if _UK_FORMATTABLE.match(cleaned):
        digits = cleaned[2:]
        if len(digits) in (9, 12):
            groups = [digits[i:i + 3] for i in range(0, len(digits), 3)]
            return "GB " + " ".join(groups)

    return f"{cleaned[:2]} {cleaned[2:]}"


def is_vat_country(country_code: str) -> bool:
    """Check if a country has a known VAT number pattern."""
    return (country_code or "").upper() in VAT_PATTERNS


def get_supported_vat_countries() -> List[str]:
    """List the country codes with a known VAT number pattern."""
    return list(VAT_PATTERNS.keys())
