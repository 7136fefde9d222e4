# sociopedia/services/firestore_service.py
"""
Firestore 기반 저장소 어댑터.

서비스 계층은 아래 메서드들만 사용하므로, 테스트에서는 같은 메서드를 가진
인메모리 구현으로 교체할 수 있습니다.

- FirestoreUserStore: users 컬렉션 (+ 이메일 유일성 인덱스 user_emails)
- FirestorePostStore: posts 컬렉션
"""
import hashlib
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from firebase_admin import firestore
from google.api_core.exceptions import GoogleAPICallError
from google.cloud.firestore_v1.base_query import FieldFilter

from sociopedia.core.exceptions import ConflictError, NotFoundError
from sociopedia.models.post import Post
from sociopedia.models.user import User
from sociopedia.utils.datetime_utils import DateTimeUtils


def email_key(email: str) -> str:
    """이메일을 문서 ID로 쓸 수 있는 형태로 바꿉니다. ('/' 등은 문서 ID에 쓸 수 없음)"""
    return hashlib.sha256(email.strip().lower().encode('utf-8')).hexdigest()


@contextmanager
def _classified_read(description: str):
    """조회 중 발생한 Firestore 오류를 ConflictError(STORE_READ_FAILED)로 바꿉니다."""
    try:
        yield
    except GoogleAPICallError as e:
        logging.error(f"{description} 조회 실패: {e}", exc_info=True)
        raise ConflictError(f"{description} 정보를 조회하지 못했습니다.", "STORE_READ_FAILED")


class FirestoreUserStore:
    """사용자 문서 조회/생성/수정을 담당합니다."""

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.users_ref = self.db.collection('users')
        self.emails_ref = self.db.collection('user_emails')

    def get(self, user_id: str) -> Optional[User]:
        with _classified_read("사용자"):
            doc = self.users_ref.document(user_id).get()
        if not doc.exists:
            return None
        return User.from_dict(doc.to_dict())

    def get_many(self, user_ids: Iterable[str]) -> List[User]:
        """여러 사용자를 한 번에 조회합니다. 존재하지 않는 ID는 건너뜁니다. 순서는 보장하지 않습니다."""
        refs = [self.users_ref.document(user_id) for user_id in user_ids]
        if not refs:
            return []
        with _classified_read("사용자 목록"):
            docs = [doc for doc in self.db.get_all(refs) if doc.exists]
        return [User.from_dict(doc.to_dict()) for doc in docs]

    def find_by_email(self, email: str) -> Optional[User]:
        with _classified_read("사용자"):
            query = self.users_ref.where(filter=FieldFilter('email', '==', email.strip().lower())).limit(1).stream()
            user_doc = next(query, None)
        if not user_doc:
            return None
        return User.from_dict(user_doc.to_dict())

    def create(self, user: User) -> User:
        """
        새 사용자를 저장합니다.
        user_emails/{hash(email)} 문서를 같은 트랜잭션에서 만들어 이메일 중복을 막습니다.
        """
        transaction = self.db.transaction()

        @firestore.transactional
        def _create_in_transaction(transaction, user):
            email_ref = self.emails_ref.document(email_key(user.email))
            if email_ref.get(transaction=transaction).exists:
                raise ConflictError("이미 가입된 이메일입니다.", "EMAIL_ALREADY_EXISTS")
            transaction.set(email_ref, {'user_id': user.user_id, 'created_at': DateTimeUtils.now()})
            transaction.set(self.users_ref.document(user.user_id), user.to_dict())

        try:
            _create_in_transaction(transaction, user)
        except GoogleAPICallError as e:
            logging.error(f"사용자 저장 실패 (user_id: {user.user_id}): {e}", exc_info=True)
            raise ConflictError("사용자를 저장하지 못했습니다.", "USER_WRITE_FAILED")
        return user

    def update(self, user_id: str, changes: Dict[str, Any]) -> User:
        user_ref = self.users_ref.document(user_id)
        with _classified_read("사용자"):
            exists = user_ref.get().exists
        if not exists:
            raise NotFoundError("사용자를 찾을 수 없습니다.", "USER_NOT_FOUND")

        update_data = DateTimeUtils.for_firestore(dict(changes, updated_at=DateTimeUtils.now()))
        try:
            user_ref.update(update_data)
        except GoogleAPICallError as e:
            logging.error(f"사용자 수정 실패 (user_id: {user_id}): {e}", exc_info=True)
            raise ConflictError("사용자 정보를 수정하지 못했습니다.", "USER_WRITE_FAILED")
        with _classified_read("사용자"):
            doc = user_ref.get()
        return User.from_dict(doc.to_dict())

    def update_pair(self, user_id: str, other_id: str,
                    mutate: Callable[[User, User], None]) -> Tuple[User, User]:
        """
        두 사용자 문서를 하나의 트랜잭션에서 읽고, mutate로 수정한 뒤 함께 저장합니다.
        충돌 시 Firestore가 트랜잭션을 재시도하므로 mutate는 입력만 보고 동작해야 합니다.
        """
        transaction = self.db.transaction()

        @firestore.transactional
        def _update_in_transaction(transaction, user_id, other_id):
            user_ref = self.users_ref.document(user_id)
            other_ref = self.users_ref.document(other_id)
            user_doc = user_ref.get(transaction=transaction)
            other_doc = other_ref.get(transaction=transaction)
            if not user_doc.exists:
                raise NotFoundError(f"사용자를 찾을 수 없습니다: {user_id}", "USER_NOT_FOUND")
            if not other_doc.exists:
                raise NotFoundError(f"사용자를 찾을 수 없습니다: {other_id}", "USER_NOT_FOUND")

            user = User.from_dict(user_doc.to_dict())
            other = User.from_dict(other_doc.to_dict())
            mutate(user, other)

            updated_at = DateTimeUtils.now()
            user.updated_at = updated_at
            other.updated_at = updated_at
            transaction.set(user_ref, user.to_dict())
            transaction.set(other_ref, other.to_dict())
            return user, other

        try:
            return _update_in_transaction(transaction, user_id, other_id)
        except GoogleAPICallError as e:
            logging.error(f"사용자 쌍 수정 실패 ({user_id}, {other_id}): {e}", exc_info=True)
            raise ConflictError("사용자 정보를 수정하지 못했습니다.", "USER_WRITE_FAILED")


class FirestorePostStore:
    """게시물 문서 조회/생성/수정을 담당합니다."""

    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.posts_ref = self.db.collection('posts')

    def create(self, post: Post) -> Post:
        try:
            self.posts_ref.document(post.post_id).set(post.to_dict())
        except GoogleAPICallError as e:
            logging.error(f"게시물 저장 실패 (post_id: {post.post_id}): {e}", exc_info=True)
            raise ConflictError("게시물을 저장하지 못했습니다.", "POST_WRITE_FAILED")
        return post

    def get(self, post_id: str) -> Optional[Post]:
        with _classified_read("게시물"):
            doc = self.posts_ref.document(post_id).get()
        if not doc.exists:
            return None
        return Post.from_dict(doc.to_dict())

    def list_all(self) -> List[Post]:
        """
        전체 게시물을 작성 순서(오래된 것부터)로 반환합니다.
        order_by('created_at')는 해당 필드가 없는 문서를 결과에서 빼므로 정렬은 메모리에서 합니다.
        created_at이 없는 문서는 읽은 시점 값으로 채워져 맨 뒤에 옵니다.
        """
        with _classified_read("게시물 목록"):
            posts = [Post.from_dict(doc.to_dict()) for doc in self.posts_ref.stream()]
        return sorted(posts, key=lambda post: post.created_at)

    def list_by_author(self, user_id: str) -> List[Post]:
        # where + order_by 조합은 복합 인덱스가 필요하므로 정렬은 메모리에서 합니다.
        with _classified_read("게시물 목록"):
            docs = self.posts_ref.where(filter=FieldFilter('user_id', '==', user_id)).stream()
            posts = [Post.from_dict(doc.to_dict()) for doc in docs]
        return sorted(posts, key=lambda post: post.created_at)

    def update(self, post_id: str, mutate: Callable[[Post], None]) -> Post:
        """게시물 하나를 트랜잭션 안에서 읽고 수정한 뒤 저장합니다."""
        transaction = self.db.transaction()

        @firestore.transactional
        def _update_in_transaction(transaction, post_id):
            post_ref = self.posts_ref.document(post_id)
            post_doc = post_ref.get(transaction=transaction)
            if not post_doc.exists:
                raise NotFoundError("게시물을 찾을 수 없습니다.", "POST_NOT_FOUND")

            post = Post.from_dict(post_doc.to_dict())
            mutate(post)
            post.updated_at = DateTimeUtils.now()
            transaction.set(post_ref, post.to_dict())
            return post

        try:
            return _update_in_transaction(transaction, post_id)
        except GoogleAPICallError as e:
            logging.error(f"게시물 수정 실패 (post_id: {post_id}): {e}", exc_info=True)
            raise ConflictError("게시물을 수정하지 못했습니다.", "POST_WRITE_FAILED")
