# sociopedia/models/user.py
from dataclasses import dataclass, field, asdict, fields
from datetime import datetime
from typing import Optional, List, Dict, Any

from sociopedia.utils.datetime_utils import DateTimeUtils


@dataclass
class User:
    """
    Firestore 'users' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    password에는 bcrypt 해시만 저장됩니다.
    """
    user_id: str
    first_name: str
    last_name: str
    email: str
    password: str
    picture_path: str = ""
    friends: List[str] = field(default_factory=list)
    location: Optional[str] = None
    occupation: Optional[str] = None
    viewed_profile: int = 0
    impressions: int = 0
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        """Firestore 문서 딕셔너리로부터 User 인스턴스를 생성합니다. 모르는 필드는 무시합니다."""
        known = {f.name for f in fields(cls)}
        processed_data = {k: v for k, v in data.items() if k in known}

        if processed_data.get('friends') is None:
            processed_data['friends'] = []
        else:
            processed_data['friends'] = list(processed_data['friends'])
        if processed_data.get('picture_path') is None:
            processed_data['picture_path'] = ""

        for key in ('created_at', 'updated_at'):
            if key in processed_data:
                processed_data[key] = DateTimeUtils.coerce_datetime(processed_data[key]) or DateTimeUtils.now()

        return cls(**processed_data)

    def to_dict(self) -> Dict[str, Any]:
        """Firestore 저장용 딕셔너리."""
        return DateTimeUtils.for_firestore(asdict(self))
