from __future__ import annotations

from typing import Any, Dict, List, Tuple

from pymongo import ASCENDING, DESCENDING

# Collection names (mongoose pluralized model names of the original deployment).
USERS = "users"
USER_VERIFICATIONS = "userverifications"
USER_LOGINS = "userlogins"
PASSWORD_RESETS = "passwordresets"
NEWS = "news"
NEWS_ITEMS = "newsitems"
AGRICULTURES = "agricultures"
AGRICULTURE_ITEMS = "agricultureitems"
TAGS = "tags"
YEARS = "years"
PERSONNELS = "personnels"
PARTNERS = "partners"
COOPERATIVES = "cooperatives"
FEEDBACKS = "feedbacks"
CONTACTS = "contacts"


IndexSpec = Tuple[List[Tuple[str, int]], Dict[str, Any]]

INDEXES: Dict[str, List[IndexSpec]] = {
    USERS: [
        ([("email", ASCENDING)], {"unique": True}),
    ],
    USER_VERIFICATIONS: [([("userId", ASCENDING)], {})],
    USER_LOGINS: [([("userId", ASCENDING)], {})],
    PASSWORD_RESETS: [([("userId", ASCENDING)], {})],
    YEARS: [([("year", ASCENDING)], {"unique": True})],
    NEWS: [([("day", DESCENDING)], {}), ([("visible", ASCENDING)], {})],
    AGRICULTURES: [
        ([("day", DESCENDING)], {}),
        ([("vi.tag", ASCENDING)], {}),
        ([("jp.tag", ASCENDING)], {}),
    ],
    TAGS: [([("vi", ASCENDING)], {}), ([("jp", ASCENDING)], {})],
    CONTACTS: [([("default", ASCENDING)], {})],
}
