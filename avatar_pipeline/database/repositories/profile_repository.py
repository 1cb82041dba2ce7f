from datetime import datetime, timezone

from psycopg.rows import dict_row

from avatar_pipeline.database.connection import get_connection
from avatar_pipeline.database.models import ProfileRecord
from avatar_pipeline.upload.exceptions import ProfileNotFoundError


class ProfileRepository:
    """Database operations for the avatar columns of the profiles table."""

    def find_by_id(self, user_id: str) -> ProfileRecord:
        """Find a profile by user ID.

        Raises:
            ProfileNotFoundError: if no profile with this ID exists.
        """
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, avatar_url, updated_at
                    FROM profiles
                    WHERE id = %s
                    """,
                    (user_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise ProfileNotFoundError(f"Profile {user_id} not found")

        return ProfileRecord(
            id=str(row["id"]),
            avatar_url=row["avatar_url"],
            updated_at=row["updated_at"],
        )

    def get_avatar_url(self, user_id: str) -> str | None:
        """Return the stored avatar URL, or None if the user has none."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT avatar_url FROM profiles WHERE id = %s",
                    (user_id,),
                )
                row = cur.fetchone()

        if row is None or not row[0]:
            return None
        return str(row[0])

    def update_avatar_url(
        self,
        user_id: str,
        avatar_url: str | None,
        updated_at: datetime | None = None,
    ) -> None:
        """Write avatar_url and updated_at for a single profile row.

        Passing None as avatar_url clears the column.

        Raises:
            ProfileNotFoundError: if no profile with this ID exists.
        """
        timestamp = updated_at if updated_at is not None else datetime.now(timezone.utc)
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE profiles
                    SET avatar_url = %s,
                        updated_at = %s
                    WHERE id = %s
                    """,
                    (avatar_url, timestamp, user_id),
                )
                if cur.rowcount == 0:
                    raise ProfileNotFoundError(f"Profile {user_id} not found")
            conn.commit()
