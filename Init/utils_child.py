# Init/utils_child.py
# ---------------------------------
# Parsing of the child's date of birth entered on the Init page.

from datetime import date
from typing import Optional


def parse_birthday(value, today: Optional[date] = None) -> Optional[date]:
    """Return a date for 'YYYY-MM-DD', or None if it is not a past date."""
    today = today or date.today()
    try:
        born = date.fromisoformat((value or '').strip())
    except ValueError:
        return None
    if born > today:
        return None
    return born
