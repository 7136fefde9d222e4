# sociopedia/conftest.py
"""
공용 테스트 픽스처

Firestore 대신 같은 메서드를 가진 인메모리 저장소를 create_app에 주입합니다.
문서는 to_dict()/from_dict()를 거쳐 저장되므로 모델 변환도 함께 검증됩니다.
"""
import copy
import threading
from typing import Callable, Dict, Iterable, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest

from sociopedia import create_app
from sociopedia.core.exceptions import ConflictError, NotFoundError
from sociopedia.models.post import Post
from sociopedia.models.user import User
from sociopedia.utils.datetime_utils import DateTimeUtils

UPLOADED_PICTURE_URL = "https://storage.googleapis.com/test-bucket/assets/uploaded.png"


class InMemoryUserStore:
    def __init__(self):
        self.documents: Dict[str, dict] = {}
        self.write_count = 0
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[User]:
        doc = self.documents.get(user_id)
        return User.from_dict(copy.deepcopy(doc)) if doc else None

    def get_many(self, user_ids: Iterable[str]) -> List[User]:
        return [self.get(user_id) for user_id in user_ids if user_id in self.documents]

    def find_by_email(self, email: str) -> Optional[User]:
        for doc in self.documents.values():
            if doc['email'] == email.strip().lower():
                return User.from_dict(copy.deepcopy(doc))
        return None

    def create(self, user: User) -> User:
        with self._lock:
            if any(doc['email'] == user.email for doc in self.documents.values()):
                raise ConflictError("이미 가입된 이메일입니다.", "EMAIL_ALREADY_EXISTS")
            self.documents[user.user_id] = user.to_dict()
            self.write_count += 1
        return user

    def update(self, user_id: str, changes: dict) -> User:
        with self._lock:
            if user_id not in self.documents:
                raise NotFoundError("사용자를 찾을 수 없습니다.", "USER_NOT_FOUND")
            self.documents[user_id].update(DateTimeUtils.for_firestore(dict(changes, updated_at=DateTimeUtils.now())))
            self.write_count += 1
        return self.get(user_id)

    def update_pair(self, user_id: str, other_id: str,
                    mutate: Callable[[User, User], None]) -> Tuple[User, User]:
        with self._lock:
            user = self.get(user_id)
            other = self.get(other_id)
            if user is None:
                raise NotFoundError(f"사용자를 찾을 수 없습니다: {user_id}", "USER_NOT_FOUND")
            if other is None:
                raise NotFoundError(f"사용자를 찾을 수 없습니다: {other_id}", "USER_NOT_FOUND")
            mutate(user, other)
            self.documents[user_id] = user.to_dict()
            self.documents[other_id] = other.to_dict()
            self.write_count += 2
        return self.get(user_id), self.get(other_id)


class InMemoryPostStore:
    def __init__(self):
        self.documents: Dict[str, dict] = {}
        self.write_count = 0
        self._lock = threading.Lock()

    def create(self, post: Post) -> Post:
        with self._lock:
            self.documents[post.post_id] = post.to_dict()
            self.write_count += 1
        return post

    def get(self, post_id: str) -> Optional[Post]:
        doc = self.documents.get(post_id)
        return Post.from_dict(copy.deepcopy(doc)) if doc else None

    def list_all(self) -> List[Post]:
        posts = [Post.from_dict(copy.deepcopy(doc)) for doc in self.documents.values()]
        return sorted(posts, key=lambda post: post.created_at)

    def list_by_author(self, user_id: str) -> List[Post]:
        return [post for post in self.list_all() if post.user_id == user_id]

    def update(self, post_id: str, mutate: Callable[[Post], None]) -> Post:
        with self._lock:
            post = self.get(post_id)
            if post is None:
                raise NotFoundError("게시물을 찾을 수 없습니다.", "POST_NOT_FOUND")
            mutate(post)
            post.updated_at = DateTimeUtils.now()
            self.documents[post_id] = post.to_dict()
            self.write_count += 1
        return self.get(post_id)


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def post_store():
    return InMemoryPostStore()


@pytest.fixture
def storage():
    storage_service = MagicMock()
    storage_service.upload_picture.return_value = UPLOADED_PICTURE_URL
    return storage_service


@pytest.fixture
def app(user_store, post_store, storage):
    return create_app('testing', services={
        'user_store': user_store,
        'post_store': post_store,
        'storage': storage,
    })


@pytest.fixture
def client(app):
    return app.test_client()


def register_payload(email: str, first_name: str = "Ada", password: str = "secret", **extra) -> dict:
    payload = {
        "firstName": first_name,
        "lastName": "Lovelace",
        "email": email,
        "password": password,
        "location": "London",
        "occupation": "Mathematician",
    }
    payload.update(extra)
    return payload


@pytest.fixture
def register(client):
    """회원가입 후 (응답 JSON, 토큰)을 반환하는 헬퍼."""
    def _register(email: str, first_name: str = "Ada", password: str = "secret", **extra):
        res = client.post("/auth/register", json=register_payload(email, first_name, password, **extra))
        assert res.status_code == 201, res.get_json()
        login_res = client.post("/auth/login", json={"email": email, "password": password})
        assert login_res.status_code == 200, login_res.get_json()
        return res.get_json(), login_res.get_json()["token"]
    return _register


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
