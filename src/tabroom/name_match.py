"""
Fuzzy match between a table cell and the user's display name.

Deliberately permissive: the result only ranks or selects candidate rows and
is never proof of identity.
"""


def normalize_name(text: str) -> str:
    """Lower-case and keep letters only."""
    return "".join(ch for ch in (text or "").lower() if ch.isalpha())


def name_matches(cell_text: str, user_name: str) -> bool:
    """
    True if cell_text plausibly refers to user_name.

    Handles "Smith, Jane", full names inside longer cells, and team codes that
    pair a surname with an initial ("Smith Jo").
    """
    cell = normalize_name(cell_text)
    user = normalize_name(user_name)
    if not cell or not user:
        return False
    if user in cell or cell in user:
        return True

    tokens = [t for t in (user_name or "").split() if normalize_name(t)]
    if len(tokens) < 2:
        return normalize_name(tokens[0]) in cell if tokens else False

    first, last = tokens[0].lower(), tokens[-1].lower()
    raw = cell_text.lower()
    if first in raw and last in raw:
        return True

    last_norm = normalize_name(last)
    first_initial = normalize_name(first)[:1]
    return bool(last_norm) and last_norm in cell and first_initial in raw
