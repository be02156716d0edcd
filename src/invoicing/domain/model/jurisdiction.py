"""Jurisdictions (states / union territories) for the dual-rate regime.

Jurisdictions are compared as exact strings everywhere in the domain.
The table below only helps derive a customer's jurisdiction from the
first two digits of a tax-registration identifier (GSTIN).
"""

from __future__ import annotations

STATE_CODES: dict[str, str] = {
    "01": "Jammu and Kashmir",
    "02": "Himachal Pradesh",
    "03": "Punjab",
    "04": "Chandigarh",
    "05": "Uttarakhand",
    "06": "Haryana",
    "07": "Delhi",
    "08": "Rajasthan",
    "09": "Uttar Pradesh",
    "10": "Bihar",
    "11": "Sikkim",
    "12": "Arunachal Pradesh",
    "13": "Nagaland",
    "14": "Manipur",
    "15": "Mizoram",
    "16": "Tripura",
    "17": "Meghalaya",
    "18": "Assam",
    "19": "West Bengal",
    "20": "Jharkhand",
    "21": "Odisha",
    "22": "Chhattisgarh",
    "23": "Madhya Pradesh",
    "24": "Gujarat",
    "25": "Daman and Diu",
    "26": "Dadra and Nagar Haveli",
    "27": "Maharashtra",
    "28": "Andhra Pradesh",
    "29": "Karnataka",
    "30": "Goa",
    "31": "Lakshadweep",
    "32": "Kerala",
    "33": "Tamil Nadu",
    "34": "Puducherry",
    "35": "Andaman and Nicobar Islands",
    "36": "Telangana",
    "37": "Andhra Pradesh",
}


def jurisdiction_from_tax_id(tax_id: str | None) -> str | None:
    """Return the jurisdiction encoded in a GSTIN, or None if unknown."""
    if not tax_id or len(tax_id.strip()) < 2:
        return None
    return STATE_CODES.get(tax_id.strip()[:2])
