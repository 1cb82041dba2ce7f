from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from avatar_pipeline.database.models import ProfileRecord
from avatar_pipeline.database.repositories.profile_repository import ProfileRepository
from avatar_pipeline.upload.exceptions import ProfileNotFoundError, RecordUpdateError


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


class TestFindById:
    @patch("avatar_pipeline.database.repositories.profile_repository.get_connection")
    def test_returns_profile_when_found(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        updated = datetime(2025, 1, 1, tzinfo=timezone.utc)
        mock_cursor.fetchone.return_value = {
            "id": "u1",
            "avatar_url": "https://cdn/u1/avatar.jpg",
            "updated_at": updated,
        }

        result = ProfileRepository().find_by_id("u1")

        assert result == ProfileRecord(
            id="u1", avatar_url="https://cdn/u1/avatar.jpg", updated_at=updated
        )

    @patch("avatar_pipeline.database.repositories.profile_repository.get_connection")
    def test_raises_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(ProfileNotFoundError, match="Profile u9 not found"):
            ProfileRepository().find_by_id("u9")


class TestGetAvatarUrl:
    @patch("avatar_pipeline.database.repositories.profile_repository.get_connection")
    def test_returns_url(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = ("https://cdn/u1/avatar.jpg",)

        assert ProfileRepository().get_avatar_url("u1") == "https://cdn/u1/avatar.jpg"
        mock_cursor.execute.assert_called_once()
        assert mock_cursor.execute.call_args.args[1] == ("u1",)

    @patch("avatar_pipeline.database.repositories.profile_repository.get_connection")
    @pytest.mark.parametrize("row", [None, (None,), ("",)])
    def test_returns_none_without_avatar(self, mock_get_conn: MagicMock, row: object) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = row

        assert ProfileRepository().get_avatar_url("u1") is None


class TestUpdateAvatarUrl:
    @patch("avatar_pipeline.database.repositories.profile_repository.get_connection")
    def test_updates_and_commits(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1
        ts = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)

        ProfileRepository().update_avatar_url("u1", "https://cdn/u1/avatar.jpg", updated_at=ts)

        sql, params = mock_cursor.execute.call_args.args
        assert "UPDATE profiles" in sql
        assert params == ("https://cdn/u1/avatar.jpg", ts, "u1")
        mock_conn.commit.assert_called_once()

    @patch("avatar_pipeline.database.repositories.profile_repository.get_connection")
    def test_defaults_updated_at_to_now_utc(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        ProfileRepository().update_avatar_url("u1", None)

        _sql, params = mock_cursor.execute.call_args.args
        assert params[0] is None
        assert params[1].tzinfo is timezone.utc

    @patch("avatar_pipeline.database.repositories.profile_repository.get_connection")
    def test_raises_when_no_row_updated(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        with pytest.raises(RecordUpdateError, match="Profile u9 not found"):
            ProfileRepository().update_avatar_url("u9", "https://cdn/u9/avatar.jpg")
        mock_conn.commit.assert_not_called()
