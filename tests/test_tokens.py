"""Tests for session token issuing, validation and revocation."""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from jose import jwt
from sqlalchemy.exc import OperationalError

from src.config import get_settings
from src.models.session_token import SessionToken
from src.models.user import User
from src.services.exceptions import AuthError, StorageError
from src.services.tokens import (
    authenticate,
    create_session_token,
    decode_session_token,
    issue_token,
    revoke_all_tokens,
    revoke_token,
)

settings = get_settings()


class TestDecodeSessionToken:
    """Tests for token signature verification."""

    def test_round_trip_user_id(self):
        """A freshly created token decodes to its user id."""
        assert decode_session_token(create_session_token(42)) == 42

    def test_tokens_are_distinct(self):
        """Two tokens for the same user never collide."""
        assert create_session_token(1) != create_session_token(1)

    def test_rejects_garbage(self):
        with pytest.raises(AuthError) as exc_info:
            decode_session_token("not-a-token")
        assert exc_info.value.reason == "malformed"

    def test_rejects_wrong_signature(self):
        forged = jwt.encode({"sub": "1"}, "some-other-secret", algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthError) as exc_info:
            decode_session_token(forged)
        assert exc_info.value.reason == "malformed"

    def test_rejects_expired(self):
        expired = jwt.encode(
            {"sub": "1", "exp": datetime.now(UTC) - timedelta(minutes=1)},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthError):
            decode_session_token(expired)

    def test_rejects_missing_subject(self):
        token = jwt.encode({"foo": "bar"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthError) as exc_info:
            decode_session_token(token)
        assert exc_info.value.reason == "malformed"


class TestAuthenticate:
    """Tests for the three-step token check."""

    def test_live_token(self, db, user_one):
        session = authenticate(db, user_one.token)
        assert session.user.id == user_one.user_id
        assert session.token == user_one.token

    def test_unknown_user(self, db):
        with pytest.raises(AuthError) as exc_info:
            authenticate(db, create_session_token(123456))
        assert exc_info.value.reason == "unknown user"

    def test_signed_but_never_issued(self, db, user_one):
        """A validly signed token that is not in the active list is revoked."""
        with pytest.raises(AuthError) as exc_info:
            authenticate(db, create_session_token(user_one.user_id))
        assert exc_info.value.reason == "revoked"

    def test_each_user_resolves_own_token(self, db, user_one, user_two):
        session = authenticate(db, user_two.token)
        assert session.user.id == user_two.user_id


class TestIssueAndRevoke:
    """Tests for active-list mutations."""

    def test_issue_appends(self, db, user_one):
        user = db.get(User, user_one.user_id)
        token = issue_token(db, user)

        db.refresh(user)
        assert [t.token for t in user.tokens] == [user_one.token, token]

    def test_revoke_one(self, db, user_one):
        user = db.get(User, user_one.user_id)
        second = issue_token(db, user)

        revoke_token(db, user, user_one.token)

        db.refresh(user)
        assert [t.token for t in user.tokens] == [second]
        with pytest.raises(AuthError) as exc_info:
            authenticate(db, user_one.token)
        assert exc_info.value.reason == "revoked"

    def test_revoke_one_is_idempotent(self, db, user_one):
        user = db.get(User, user_one.user_id)
        revoke_token(db, user, user_one.token)
        revoke_token(db, user, user_one.token)
        assert db.query(SessionToken).filter_by(user_id=user.id).count() == 0

    def test_revoke_one_ignores_other_users_tokens(self, db, user_one, user_two):
        user = db.get(User, user_one.user_id)
        revoke_token(db, user, user_two.token)
        assert authenticate(db, user_two.token).user.id == user_two.user_id

    def test_revoke_all(self, db, user_one, user_two):
        user = db.get(User, user_one.user_id)
        issue_token(db, user)

        revoke_all_tokens(db, user)

        assert db.query(SessionToken).filter_by(user_id=user_one.user_id).count() == 0
        assert db.query(SessionToken).filter_by(user_id=user_two.user_id).count() == 1

    def test_issue_failure_leaves_no_token(self, db, user_one):
        """A failed commit raises StorageError and the token is not kept."""
        user = db.get(User, user_one.user_id)

        failure = OperationalError("COMMIT", {}, Exception("db down"))
        with patch.object(db, "commit", side_effect=failure):
            with pytest.raises(StorageError):
                issue_token(db, user)

        assert db.query(SessionToken).filter_by(user_id=user_one.user_id).count() == 1
