# sociopedia/models/post.py
from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Optional, List, Dict, Any, Set

from sociopedia.utils.datetime_utils import DateTimeUtils


@dataclass
class Post:
    """
    Firestore 'posts' 컬렉션의 문서 구조를 정의하는 데이터클래스.

    first_name, last_name, location, user_picture_path는 작성 시점의 작성자
    정보를 복사해 둔 값이며 이후 프로필이 바뀌어도 갱신하지 않습니다.
    likes는 좋아요를 누른 user_id 집합입니다.
    comments는 내용 형식을 가정하지 않고 그대로 보존합니다. (이 서버가 추가하는 댓글은 딕셔너리)
    """
    post_id: str
    user_id: str
    first_name: str
    last_name: str
    location: Optional[str] = None
    description: Optional[str] = None
    picture_path: Optional[str] = None
    user_picture_path: Optional[str] = None
    likes: Set[str] = field(default_factory=set)
    comments: List[Any] = field(default_factory=list)
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    def is_liked_by(self, user_id: str) -> bool:
        return user_id in self.likes

    @staticmethod
    def likes_from_document(raw: Any) -> Set[str]:
        """
        문서의 likes 필드를 집합으로 변환합니다.
        {user_id: true} 맵이 기본 형식이고, false로 남아 있는 항목은 좋아요가 아닌 것으로 봅니다.
        """
        if not raw:
            return set()
        if isinstance(raw, dict):
            return {user_id for user_id, liked in raw.items() if liked}
        return set(raw)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        """Firestore 문서 딕셔너리로부터 Post 인스턴스를 생성합니다."""
        known = {f.name for f in fields(cls)}
        processed_data = {k: v for k, v in data.items() if k in known}

        processed_data['likes'] = cls.likes_from_document(processed_data.get('likes'))
        processed_data['comments'] = list(processed_data.get('comments') or [])

        for key in ('created_at', 'updated_at'):
            if key in processed_data:
                processed_data[key] = DateTimeUtils.coerce_datetime(processed_data[key]) or DateTimeUtils.now()

        return cls(**processed_data)

    def to_dict(self) -> Dict[str, Any]:
        """Firestore 저장용 딕셔너리. likes는 {user_id: true} 맵으로 저장합니다."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data['likes'] = {user_id: True for user_id in sorted(self.likes)}
        data['comments'] = list(self.comments)
        return DateTimeUtils.for_firestore(data)
