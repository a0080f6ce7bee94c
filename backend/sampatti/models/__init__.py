from __future__ import annotations

from sampatti.models.user import User  # noqa: F401
from sampatti.models.nominee import Nominee, NomineeAccessLog  # noqa: F401
from sampatti.models.holding import Asset, Document, DocumentNomineeAccess  # noqa: F401
