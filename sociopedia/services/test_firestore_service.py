# sociopedia/services/test_firestore_service.py
"""
Firestore 어댑터 단위 테스트.
클라이언트는 MagicMock으로 대체하고, firestore.transactional은 함수를 그대로 실행하도록 바꿉니다.
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from google.api_core.exceptions import GoogleAPICallError

from sociopedia.api.users.services import toggle_friendship
from sociopedia.core.exceptions import ConflictError, NotFoundError
from sociopedia.models.post import Post
from sociopedia.models.user import User
from sociopedia.services import firestore_service
from sociopedia.services.firestore_service import FirestorePostStore, FirestoreUserStore, email_key


@pytest.fixture(autouse=True)
def plain_transactional():
    with patch.object(firestore_service.firestore, "transactional", new=lambda fn: fn):
        yield


def _db(*collection_names):
    db = MagicMock()
    collections = {name: MagicMock() for name in collection_names}
    db.collection.side_effect = collections.__getitem__
    return db, collections


def _snapshot(data=None):
    snapshot = MagicMock()
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    return snapshot


def _user(user_id, friends=None):
    return User(user_id=user_id, first_name="Ada", last_name="Lovelace",
                email=f"{user_id}@x.com", password="$2b$hash", friends=list(friends or []))


def test_email_key_ignores_case_and_spaces():
    assert email_key(" Ada@X.com ") == email_key("ada@x.com")
    assert "/" not in email_key("a/b@x.com")


def test_create_user_writes_email_index_and_user():
    db, collections = _db("users", "user_emails")
    collections["user_emails"].document.return_value.get.return_value = _snapshot(None)
    transaction = db.transaction.return_value

    FirestoreUserStore(db).create(_user("u1"))

    collections["user_emails"].document.assert_called_with(email_key("u1@x.com"))
    collections["users"].document.assert_called_with("u1")
    assert transaction.set.call_count == 2


def test_create_user_with_taken_email_conflicts():
    db, collections = _db("users", "user_emails")
    collections["user_emails"].document.return_value.get.return_value = _snapshot({"user_id": "other"})
    transaction = db.transaction.return_value

    with pytest.raises(ConflictError) as exc_info:
        FirestoreUserStore(db).create(_user("u1"))
    assert exc_info.value.error_code == "EMAIL_ALREADY_EXISTS"
    transaction.set.assert_not_called()


def test_create_user_wraps_backend_failure():
    db, collections = _db("users", "user_emails")
    collections["user_emails"].document.return_value.get.return_value = _snapshot(None)
    db.transaction.return_value.set.side_effect = GoogleAPICallError("unavailable")

    with pytest.raises(ConflictError):
        FirestoreUserStore(db).create(_user("u1"))


def test_update_pair_writes_both_documents():
    db, collections = _db("users", "user_emails")
    refs = {"a": MagicMock(), "b": MagicMock()}
    refs["a"].get.return_value = _snapshot(_user("a").to_dict())
    refs["b"].get.return_value = _snapshot(_user("b").to_dict())
    collections["users"].document.side_effect = refs.__getitem__
    transaction = db.transaction.return_value

    user, other = FirestoreUserStore(db).update_pair("a", "b", toggle_friendship)

    assert user.friends == ["b"]
    assert other.friends == ["a"]
    written = {call.args[0]: call.args[1] for call in transaction.set.call_args_list}
    assert written[refs["a"]]["friends"] == ["b"]
    assert written[refs["b"]]["friends"] == ["a"]
    refs["a"].get.assert_called_with(transaction=transaction)


def test_update_pair_with_missing_user_writes_nothing():
    db, collections = _db("users", "user_emails")
    refs = {"a": MagicMock(), "ghost": MagicMock()}
    refs["a"].get.return_value = _snapshot(_user("a").to_dict())
    refs["ghost"].get.return_value = _snapshot(None)
    collections["users"].document.side_effect = refs.__getitem__
    transaction = db.transaction.return_value

    with pytest.raises(NotFoundError):
        FirestoreUserStore(db).update_pair("a", "ghost", toggle_friendship)
    transaction.set.assert_not_called()


def test_get_many_skips_missing_documents():
    db, _ = _db("users", "user_emails")
    db.get_all.return_value = [_snapshot(_user("a").to_dict()), _snapshot(None)]

    users = FirestoreUserStore(db).get_many(["a", "gone"])

    assert [user.user_id for user in users] == ["a"]


def test_get_many_with_no_ids_skips_backend():
    db, _ = _db("users", "user_emails")
    assert FirestoreUserStore(db).get_many([]) == []
    db.get_all.assert_not_called()


def test_find_by_email_returns_none_when_absent():
    db, collections = _db("users", "user_emails")
    collections["users"].where.return_value.limit.return_value.stream.return_value = iter([])
    assert FirestoreUserStore(db).find_by_email("ada@x.com") is None


def test_update_unknown_user_is_not_found():
    db, collections = _db("users", "user_emails")
    collections["users"].document.return_value.get.return_value = _snapshot(None)
    with pytest.raises(NotFoundError):
        FirestoreUserStore(db).update("ghost", {"location": "Paris"})


def test_post_update_applies_mutation_in_transaction():
    db, collections = _db("posts")
    post = Post(post_id="p1", user_id="u1", first_name="Ada", last_name="Lovelace")
    post_ref = collections["posts"].document.return_value
    post_ref.get.return_value = _snapshot(post.to_dict())
    transaction = db.transaction.return_value

    updated = FirestorePostStore(db).update("p1", lambda p: p.likes.add("u2"))

    assert updated.likes == {"u2"}
    transaction.set.assert_called_once()
    assert transaction.set.call_args.args[1]["likes"] == {"u2": True}


def test_post_update_unknown_post_is_not_found():
    db, collections = _db("posts")
    collections["posts"].document.return_value.get.return_value = _snapshot(None)
    with pytest.raises(NotFoundError) as exc_info:
        FirestorePostStore(db).update("missing", lambda p: None)
    assert exc_info.value.error_code == "POST_NOT_FOUND"


def test_list_by_author_sorts_oldest_first():
    db, collections = _db("posts")
    newer = Post(post_id="p2", user_id="u1", first_name="Ada", last_name="Lovelace",
                 created_at=datetime(2024, 2, 1, tzinfo=timezone.utc))
    older = Post(post_id="p1", user_id="u1", first_name="Ada", last_name="Lovelace",
                 created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    collections["posts"].where.return_value.stream.return_value = iter(
        [_snapshot(newer.to_dict()), _snapshot(older.to_dict())]
    )

    posts = FirestorePostStore(db).list_by_author("u1")

    assert [p.post_id for p in posts] == ["p1", "p2"]


def test_list_all_keeps_posts_without_timestamp():
    db, collections = _db("posts")
    dated = Post(post_id="p1", user_id="u1", first_name="Ada", last_name="Lovelace",
                 created_at=datetime(2024, 1, 1, tzinfo=timezone.utc)).to_dict()
    undated = {"post_id": "p0", "user_id": "u1", "first_name": "Ada", "last_name": "Lovelace"}
    collections["posts"].stream.return_value = iter([_snapshot(undated), _snapshot(dated)])

    posts = FirestorePostStore(db).list_all()

    assert [p.post_id for p in posts] == ["p1", "p0"]


def test_user_read_failure_is_classified():
    db, collections = _db("users", "user_emails")
    collections["users"].document.return_value.get.side_effect = GoogleAPICallError("unavailable")

    with pytest.raises(ConflictError) as exc_info:
        FirestoreUserStore(db).get("u1")
    assert exc_info.value.error_code == "STORE_READ_FAILED"


def test_feed_read_failure_is_classified():
    db, collections = _db("posts")
    collections["posts"].stream.side_effect = GoogleAPICallError("unavailable")

    with pytest.raises(ConflictError) as exc_info:
        FirestorePostStore(db).list_all()
    assert exc_info.value.error_code == "STORE_READ_FAILED"
