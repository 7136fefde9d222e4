# sociopedia/services/storage_service.py
import uuid
import logging
from typing import Optional
from urllib.parse import unquote

from flask import Flask
from firebase_admin import storage
from google.api_core.exceptions import NotFound
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from sociopedia.core.exceptions import InvalidArgumentError

ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}
PUBLIC_URL_HOST = "https://storage.googleapis.com"


class StorageService:
    """
    Firebase Storage에 프로필/게시물 사진을 업로드하는 서비스 클래스입니다.
    업로드된 파일은 공개로 전환되고, 그 공개 URL이 picturePath로 저장됩니다.
    """

    def __init__(self, bucket=None):
        """실제 버킷 객체는 init_app 메서드 또는 생성자로 주입됩니다."""
        self.bucket = bucket

    def init_app(self, app: Flask):
        """
        Flask 앱 초기화 과정에서 호출되어 Storage 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        """
        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: Firebase Storage 서비스가 성공적으로 초기화되었습니다.")

    def _require_bucket(self):
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")
        return self.bucket

    def upload_picture(self, file: FileStorage, folder: str = "assets") -> Optional[str]:
        """
        업로드된 이미지 파일을 버킷에 저장하고 공개 URL을 반환합니다.
        파일명이 비어 있으면 None을 반환합니다.

        :param file: 요청의 multipart 파일 (request.files['picture'])
        :param folder: 버킷 내 저장 폴더
        :return: 누구나 내려받을 수 있는 공개 URL
        """
        bucket = self._require_bucket()
        if file is None or not file.filename:
            return None

        filename = secure_filename(file.filename)
        extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
        if extension not in ALLOWED_EXTENSIONS:
            raise InvalidArgumentError(f"'{extension}'은(는) 허용되지 않는 이미지 형식입니다.", "INVALID_FILE_TYPE")

        destination_blob_name = f"{folder}/{uuid.uuid4()}.{extension}"
        blob = bucket.blob(destination_blob_name)
        blob.upload_from_file(file.stream, content_type=file.mimetype)
        blob.make_public()
        logging.info(f"파일 업로드 완료: {destination_blob_name}")
        return blob.public_url

    def blob_name(self, picture_url: str) -> str:
        """공개 URL에서 버킷 내 경로를 꺼냅니다. 경로가 그대로 들어오면 그대로 반환합니다."""
        prefix = f"{PUBLIC_URL_HOST}/{self._require_bucket().name}/"
        if picture_url.startswith(prefix):
            return unquote(picture_url[len(prefix):])
        return picture_url

    def delete_picture(self, picture_url: str) -> None:
        """업로드했던 사진을 삭제합니다. 이미 없는 파일이면 경고만 남깁니다."""
        blob_name = self.blob_name(picture_url)
        try:
            self._require_bucket().blob(blob_name).delete()
        except NotFound:
            logging.warning(f"삭제할 파일이 없습니다: {blob_name}")
            return
        logging.info(f"파일 삭제 완료: {blob_name}")
