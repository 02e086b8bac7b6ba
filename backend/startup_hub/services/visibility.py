from typing import Any, Dict, Optional

from ..auth.security import UserRole
from ..utils.constants import PREMIUM_FIELDS


def apply_visibility(record: Dict[str, Any], role: Optional[UserRole]) -> Dict[str, Any]:
    """
    Investors see a startup unchanged; everyone else gets a copy without the
    premium contact fields (email, phone, pitch deck).
    """
    if role == UserRole.INVESTOR:
        return record
    return {key: value for key, value in record.items() if key not in PREMIUM_FIELDS}
