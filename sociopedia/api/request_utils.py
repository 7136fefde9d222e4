# sociopedia/api/request_utils.py
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from flask import request, current_app
from google.api_core.exceptions import GoogleAPICallError


def request_payload() -> Dict[str, Any]:
    """JSON 본문 또는 multipart/form 필드를 딕셔너리로 반환합니다."""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form.to_dict()


@contextmanager
def uploaded_picture(field_name: str = 'picture') -> Iterator[Optional[str]]:
    """
    요청에 사진 파일이 있으면 업로드하고 공개 URL을 넘겨줍니다. 파일이 없으면 None.
    with 블록 안에서 예외가 나면 방금 올린 파일을 지운 뒤 예외를 그대로 다시 발생시킵니다.
    """
    picture = request.files.get(field_name)
    if picture is None or not picture.filename:
        yield None
        return

    storage_service = current_app.services['storage']
    picture_url = storage_service.upload_picture(picture)
    try:
        yield picture_url
    except Exception:
        try:
            storage_service.delete_picture(picture_url)
        except GoogleAPICallError as e:
            logging.error(f"실패한 요청의 업로드 파일 삭제 실패: {picture_url} - {e}", exc_info=True)
        raise
