# sociopedia/api/users/services.py
import logging
from typing import Any, Dict, List

from sociopedia.core.exceptions import NotFoundError, InvalidArgumentError
from sociopedia.models.user import User

# 프로필 수정으로 바꿀 수 있는 필드
EDITABLE_PROFILE_FIELDS = ('first_name', 'last_name', 'location', 'occupation', 'picture_path')


def _normalize_friend_ids(friend_ids: List[str], owner_id: str) -> List[str]:
    """저장된 친구 목록에서 자기 자신과 중복 ID를 제거합니다. 순서는 유지합니다."""
    seen = set()
    normalized = []
    for friend_id in friend_ids:
        if friend_id == owner_id or friend_id in seen:
            continue
        seen.add(friend_id)
        normalized.append(friend_id)
    return normalized


def toggle_friendship(user: User, friend: User) -> bool:
    """
    두 사용자 사이의 친구 관계를 양방향으로 토글합니다.
    user 쪽에 friend가 있으면 양쪽에서 제거하고, 없으면 양쪽에 추가합니다.

    :return: 토글 후 친구 관계이면 True
    """
    user.friends = _normalize_friend_ids(user.friends, user.user_id)
    friend.friends = _normalize_friend_ids(friend.friends, friend.user_id)

    if friend.user_id in user.friends:
        user.friends.remove(friend.user_id)
        if user.user_id in friend.friends:
            friend.friends.remove(user.user_id)
        return False

    user.friends.append(friend.user_id)
    if user.user_id not in friend.friends:
        friend.friends.append(user.user_id)
    return True


class UserService:
    """
    사용자 조회, 친구 관계 토글, 프로필 수정을 담당하는 서비스 클래스.
    """
    def __init__(self, user_store):
        self.user_store = user_store

    def get_user(self, user_id: str) -> User:
        user = self.user_store.get(user_id)
        if not user:
            raise NotFoundError("사용자를 찾을 수 없습니다.", "USER_NOT_FOUND")
        return user

    def get_friends(self, user_id: str) -> List[User]:
        """사용자의 친구 목록을 조회합니다. 순서는 저장소 조회 순서를 따릅니다."""
        user = self.get_user(user_id)
        return self.user_store.get_many(_normalize_friend_ids(user.friends, user.user_id))

    def toggle_friend(self, user_id: str, friend_id: str) -> List[User]:
        """
        친구 추가/삭제를 토글하고 user_id의 갱신된 친구 목록을 반환합니다.
        - 두 사용자 문서는 하나의 트랜잭션으로 함께 저장되어 한쪽만 바뀌는 일이 없습니다.
        - 자기 자신과의 토글은 InvalidArgumentError
        - 어느 한쪽이라도 없으면 NotFoundError
        """
        if user_id == friend_id:
            raise InvalidArgumentError("자기 자신을 친구로 추가할 수 없습니다.", "SELF_FRIENDSHIP")

        result = {}

        def _mutate(user: User, friend: User) -> None:
            result['is_friend'] = toggle_friendship(user, friend)

        user, _ = self.user_store.update_pair(user_id, friend_id, _mutate)
        logging.info(
            f"친구 관계 {'추가' if result['is_friend'] else '해제'} (user_id: {user_id}, friend_id: {friend_id})"
        )
        return self.user_store.get_many(user.friends)

    def update_profile(self, user_id: str, changes: Dict[str, Any]) -> User:
        """
        프로필 정보를 수정합니다.
        이미 작성된 게시물에 복사된 작성자 정보는 바뀌지 않습니다.
        """
        update_data = {k: v for k, v in changes.items() if k in EDITABLE_PROFILE_FIELDS}
        if not update_data:
            raise InvalidArgumentError("수정할 프로필 항목이 없습니다.", "EMPTY_PROFILE_UPDATE")
        user = self.user_store.update(user_id, update_data)
        logging.info(f"프로필 수정 완료 (user_id: {user_id}, fields: {sorted(update_data)})")
        return user
