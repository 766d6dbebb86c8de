def pick(row, *keys, default=None):
    """Return the first non-empty value among ``keys``.

    Bulk uploads arrive either with the spreadsheet's camelCase headers
    (``regNo``) or with API field names (``reg_no``).
    """
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return default


def clean_str(value, case=None):
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    if case == "upper":
        return text.upper()
    if case == "lower":
        return text.lower()
    return text


def is_numeric_id(value):
    """True for a primary key given as an int or a string of digits."""
    if isinstance(value, bool) or value is None:
        return False
    return str(value).strip().isdigit()
