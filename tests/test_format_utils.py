from utils.format_utils import (
    driver_label,
    format_currency,
    format_gstin,
    format_route,
    mask_account_number,
    owner_label,
)


def test_format_currency_uses_indian_grouping():
    assert format_currency(0) == "₹0"
    assert format_currency(999) == "₹999"
    assert format_currency(1234567) == "₹12,34,567"
    assert format_currency(-150000.4) == "-₹1,50,000"


def test_labels():
    assert format_route("Pune", "Mumbai") == "Pune → Mumbai"
    assert owner_label("Shree Logistics\nPlot 4") == "Shree Logistics"
    assert owner_label(None) == "Unknown"
    assert driver_label("Suresh - 9822000000") == "Suresh"
    assert driver_label("") == "N/A"


def test_gstin_and_account_display():
    assert format_gstin("27aabcu9603r1zm") == "27 AABCU 9603 R 1Z M"
    assert format_gstin("short") == "SHORT"
    assert mask_account_number("123456789012") == "****9012"
    assert mask_account_number(None) == "****"
