from dataclasses import dataclass
from datetime import datetime


@dataclass
class ProfileRecord:
    """Represents the avatar-related columns of a row in the profiles table."""

    id: str
    avatar_url: str | None = None
    updated_at: datetime | None = None
