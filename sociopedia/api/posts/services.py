# sociopedia/api/posts/services.py
import logging
import uuid
from typing import List, Optional

from sociopedia.core.exceptions import NotFoundError
from sociopedia.models.post import Post
from sociopedia.utils.datetime_utils import DateTimeUtils


def toggle_like(post: Post, user_id: str) -> bool:
    """
    게시물의 좋아요 집합에서 user_id의 포함 여부를 뒤집습니다.

    :return: 토글 후 좋아요 상태이면 True
    """
    if user_id in post.likes:
        post.likes.discard(user_id)
        return False
    post.likes.add(user_id)
    return True


class PostService:
    """
    게시글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    저장소 접근은 주입받은 post_store / user_store를 통해서만 합니다.
    """
    def __init__(self, post_store, user_store):
        self.post_store = post_store
        self.user_store = user_store

    def _require_user(self, user_id: str):
        user = self.user_store.get(user_id)
        if not user:
            raise NotFoundError("사용자를 찾을 수 없습니다.", "USER_NOT_FOUND")
        return user

    def create_post(self, author_id: str, description: Optional[str], picture_path: Optional[str]) -> List[Post]:
        """
        새 게시글을 생성하고 전체 게시글 목록을 반환합니다.
        작성자의 이름/지역/프로필 사진은 작성 시점의 값으로 게시글에 복사됩니다.
        """
        author = self._require_user(author_id)
        new_post = Post(
            post_id=str(uuid.uuid4()),
            user_id=author.user_id,
            first_name=author.first_name,
            last_name=author.last_name,
            location=author.location,
            description=description,
            picture_path=picture_path,
            user_picture_path=author.picture_path,
        )
        self.post_store.create(new_post)
        logging.info(f"게시글 생성 완료 (post_id: {new_post.post_id}, user_id: {author_id})")
        return self.post_store.list_all()

    def list_feed(self) -> List[Post]:
        return self.post_store.list_all()

    def list_by_author(self, author_id: str) -> List[Post]:
        return self.post_store.list_by_author(author_id)

    def toggle_like(self, post_id: str, user_id: str) -> Post:
        """
        게시글 좋아요를 누르거나 취소하고 갱신된 게시글 전체를 반환합니다.
        - 좋아요를 누르는 사용자가 없으면 NotFoundError
        - 게시글이 없으면 NotFoundError
        """
        self._require_user(user_id)

        result = {}

        def _mutate(post: Post) -> None:
            result['is_liked'] = toggle_like(post, user_id)

        updated_post = self.post_store.update(post_id, _mutate)
        logging.info(
            f"좋아요 {'추가' if result['is_liked'] else '취소'} (post_id: {post_id}, user_id: {user_id})"
        )
        return updated_post

    def add_comment(self, post_id: str, user_id: str, text: str) -> Post:
        """게시글 댓글 목록 끝에 댓글을 추가합니다. 댓글은 추가만 가능합니다."""
        self._require_user(user_id)
        comment = {"user_id": user_id, "text": text, "created_at": DateTimeUtils.now()}

        def _mutate(post: Post) -> None:
            post.comments.append(dict(comment))

        updated_post = self.post_store.update(post_id, _mutate)
        logging.info(f"댓글 추가 (post_id: {post_id}, user_id: {user_id})")
        return updated_post
