"""
utils/format_utils.py

Purpose: Display formatting

- Indian Rupee formatting with lakh/crore digit grouping
- Route, owner and driver labels derived from bill fields
- Masking of bank account numbers
"""

from typing import Optional

ROUTE_SEPARATOR = " → "


def format_currency(amount: float) -> str:
    """
    Formats an amount as whole Indian Rupees.

    Example: 1234567 -> "₹12,34,567"
    """
    rounded = int(round(amount or 0))
    sign = "-" if rounded < 0 else ""
    digits = str(abs(rounded))

    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])

    return f"{sign}₹{digits}"


def format_gstin(gstin: str) -> str:
    """
    Formats GSTIN for display (adds spaces for readability).

    Format: 27 AABCU 9603 R 1Z M
    """
    gstin = gstin.strip().upper()

    if len(gstin) != 15:
        return gstin

    return f"{gstin[:2]} {gstin[2:7]} {gstin[7:11]} {gstin[11]} {gstin[12:14]} {gstin[14]}"


def format_route(origin: str, destination: str) -> str:
    return f"{origin}{ROUTE_SEPARATOR}{destination}"


def owner_label(owner_name_and_address: Optional[str]) -> str:
    """
    First line of the free-text owner field, or "Unknown".
    """
    if not owner_name_and_address:
        return "Unknown"
    return owner_name_and_address.split("\n")[0].strip() or "Unknown"


def driver_label(driver_name_and_mob: Optional[str]) -> str:
    """
    Driver name from a "Name - Mobile" field, or "N/A".
    """
    if not driver_name_and_mob:
        return "N/A"
    return driver_name_and_mob.split(" - ")[0].strip() or "N/A"


def mask_account_number(account_number: Optional[str]) -> str:
    """
    Shows only the last four digits of an account number.
    """
    if not account_number:
        return "****"
    return f"****{account_number[-4:]}"
