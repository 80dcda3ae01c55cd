"""GSTIN decoding.

A GSTIN is 15 characters:

    27 AAAAA0000A 1 Z 5
    │  │          │ │ └─ checksum character
    │  │          │ └─── literal 'Z'
    │  │          └───── entity code (registration number under the PAN)
    │  └──────────────── PAN of the holder
    └─────────────────── state code

decode_gstin() is pure and deterministic: it never performs I/O. Remote
registry lookups live in billbook.services.gst_registry and only enrich
what this module returns.
"""
import re
from dataclasses import dataclass
from typing import Optional

from billbook.core.exceptions import (
    GstinValidationError,
    GstinLengthError,
    GstinFormatError,
    UnknownStateError,
)


GSTIN_LENGTH = 15
GSTIN_PATTERN = re.compile(r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$")

# GST State Code mapping
GST_STATE_CODES = {
    "01": "Jammu & Kashmir", "02": "Himachal Pradesh", "03": "Punjab",
    "04": "Chandigarh", "05": "Uttarakhand", "06": "Haryana",
    "07": "Delhi", "08": "Rajasthan", "09": "Uttar Pradesh",
    "10": "Bihar", "11": "Sikkim", "12": "Arunachal Pradesh",
    "13": "Nagaland", "14": "Manipur", "15": "Mizoram",
    "16": "Tripura", "17": "Meghalaya", "18": "Assam",
    "19": "West Bengal", "20": "Jharkhand", "21": "Odisha",
    "22": "Chhattisgarh", "23": "Madhya Pradesh", "24": "Gujarat",
    "26": "Dadra & Nagar Haveli and Daman & Diu", "27": "Maharashtra",
    "28": "Andhra Pradesh (Old)", "29": "Karnataka", "30": "Goa",
    "31": "Lakshadweep", "32": "Kerala", "33": "Tamil Nadu",
    "34": "Puducherry", "35": "Andaman & Nicobar Islands",
    "36": "Telangana", "37": "Andhra Pradesh",
    "38": "Ladakh", "97": "Other Territory"
}

# Reverse mapping: State name to code
STATE_TO_CODE = {v.upper(): k for k, v in GST_STATE_CODES.items()}

# PAN holder status (4th PAN character) -> (holder type, label, legal name template)
HOLDER_TYPES = {
    "P": ("INDIVIDUAL", "Proprietorship", "Individual Proprietorship"),
    "C": ("COMPANY", "Private Limited Company", "{stem} Enterprises Pvt Ltd"),
    "H": ("HUF", "Hindu Undivided Family", "{stem} HUF"),
    "F": ("FIRM", "Partnership Firm", "{stem} & Associates"),
    "A": ("ASSOCIATION", "Association of Persons", "{stem} Association"),
    "T": ("TRUST", "Trust", "{stem} Trust"),
}
GENERIC_HOLDER = ("BUSINESS", "Regular", "{stem} Business")


@dataclass(frozen=True)
class DecodedGstin:
    """Structural components of a valid GSTIN."""
    gstin: str
    state_code: str
    state_name: str
    pan: str
    entity_code: str
    holder_type: str
    holder_type_label: str

    def default_legal_name(self) -> str:
        """Placeholder legal name inferred from the PAN holder type."""
        _, _, template = HOLDER_TYPES.get(self.pan[3], GENERIC_HOLDER)
        return template.format(stem=self.pan[:3])


@dataclass(frozen=True)
class GstinValidationResult:
    """Non-raising outcome of validate_gstin(), for form-driven callers."""
    is_valid: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None
    decoded: Optional[DecodedGstin] = None


def normalize_gstin(raw: Optional[str]) -> str:
    return (raw or "").strip().upper()


def format_gstin(raw: Optional[str]) -> str:
    """Uppercase, drop everything that is not A-Z or 0-9 and cut to 15 characters."""
    return re.sub(r"[^A-Z0-9]", "", (raw or "").upper())[:GSTIN_LENGTH]


def decode_gstin(raw: Optional[str]) -> DecodedGstin:
    """
    Validate and decode a GSTIN.

    Raises:
        GstinLengthError: not exactly 15 characters after trimming
        GstinFormatError: does not match the GSTIN structure
        UnknownStateError: leading two digits are not a recognized state/UT code
    """
    gstin = normalize_gstin(raw)

    if len(gstin) != GSTIN_LENGTH:
        raise GstinLengthError("GST number must be exactly 15 characters", gstin=gstin)

    if not GSTIN_PATTERN.match(gstin):
        raise GstinFormatError("Invalid GST number format", gstin=gstin)

    state_code = gstin[:2]
    state_name = GST_STATE_CODES.get(state_code)
    if state_name is None:
        raise UnknownStateError(
            f"Invalid state code '{state_code}' in GST number",
            gstin=gstin,
            state_code=state_code,
        )

    pan = gstin[2:12]
    holder_type, holder_label, _ = HOLDER_TYPES.get(pan[3], GENERIC_HOLDER)

    return DecodedGstin(
        gstin=gstin,
        state_code=state_code,
        state_name=state_name,
        pan=pan,
        entity_code=gstin[12],
        holder_type=holder_type,
        holder_type_label=holder_label,
    )


def validate_gstin(raw: Optional[str]) -> GstinValidationResult:
    """Same checks as decode_gstin(), reported as a result instead of raised."""
    try:
        decoded = decode_gstin(raw)
    except GstinValidationError as e:
        return GstinValidationResult(is_valid=False, error=e.message, error_kind=e.error_code)
    return GstinValidationResult(is_valid=True, decoded=decoded)


def state_from_gstin(raw: Optional[str]) -> Optional[str]:
    """State name for the first two characters, or None. Does not validate the rest."""
    gstin = normalize_gstin(raw)
    if len(gstin) < 2:
        return None
    return GST_STATE_CODES.get(gstin[:2])


def state_code_from_name(state_name: Optional[str]) -> Optional[str]:
    """GST state code for a state name (exact, case-insensitive)."""
    if not state_name:
        return None
    return STATE_TO_CODE.get(state_name.strip().upper())
