# app/schemas/document_schemas.py
"""
Firestore 문서(dict)를 도메인 데이터클래스로 변환하는 marshmallow 스키마 모음.

Firestore는 camelCase 필드명을 사용하므로 data_key로 매핑합니다.
문서 ID는 문서 데이터에 포함되어 있지 않으므로 load_document()가 'id' 키로 주입합니다.
"""
from collections.abc import Mapping
from typing import Any, Optional

from marshmallow import Schema, fields, validate, post_load, pre_load, ValidationError, EXCLUDE

from app.core.errors import MalformedTriggerPayloadError
from app.models.chat import Chat, Message
from app.models.claim import Claim
from app.models.geo import Coordinate
from app.models.post import Post, PostStatus
from app.models.rating import Rating
from app.models.user import User
from app.utils.datetime_utils import DateTimeUtils

# --- 커스텀 필드 ---

class CoordinateField(fields.Field):
    """
    Firestore GeoPoint 또는 {'latitude': .., 'longitude': ..} 맵을 Coordinate로 변환합니다.
    strict=False이면 위치가 불완전한 경우 오류 대신 None(위치 없음)을 반환합니다.
    """

    def __init__(self, *, strict: bool = True, **kwargs):
        self.strict = strict
        super().__init__(**kwargs)

    def _deserialize(self, value, attr, data, **kwargs):
        try:
            return self._to_coordinate(value)
        except ValidationError:
            if self.strict:
                raise
            return None

    @staticmethod
    def _to_coordinate(value: Any) -> Coordinate:
        if isinstance(value, Mapping):
            latitude, longitude = value.get('latitude'), value.get('longitude')
        else:
            latitude, longitude = getattr(value, 'latitude', None), getattr(value, 'longitude', None)

        if latitude is None or longitude is None:
            raise ValidationError("latitude와 longitude가 모두 필요합니다.")
        if isinstance(latitude, bool) or isinstance(longitude, bool):
            raise ValidationError("좌표는 숫자여야 합니다.")
        try:
            latitude, longitude = float(latitude), float(longitude)
        except (TypeError, ValueError):
            raise ValidationError("좌표는 숫자여야 합니다.")

        if not -90.0 <= latitude <= 90.0 or not -180.0 <= longitude <= 180.0:
            raise ValidationError(f"좌표 범위를 벗어났습니다: ({latitude}, {longitude})")
        return Coordinate(latitude=latitude, longitude=longitude)

class TimestampField(fields.Field):
    """Firestore Timestamp, ISO 문자열, 밀리초 timestamp를 UTC datetime으로 변환합니다."""

    def _deserialize(self, value, attr, data, **kwargs):
        try:
            return DateTimeUtils.validate_datetime_field(value, attr or "timestamp")
        except ValueError as e:
            raise ValidationError(str(e))

# --- 문서 스키마 ---

class DocumentSchema(Schema):
    """모든 문서 스키마의 기반. 앱이 추가한 알 수 없는 필드는 무시합니다."""
    class Meta:
        unknown = EXCLUDE

class UserDocumentSchema(DocumentSchema):
    """users/{userId}"""
    user_id = fields.Str(required=True, data_key='id')
    name = fields.Str(load_default="Someone", allow_none=True)
    fcm_token = fields.Str(data_key='fcmToken', load_default=None, allow_none=True)
    location = CoordinateField(strict=False, load_default=None, allow_none=True)

    @post_load
    def make_user(self, data, **kwargs):
        data['name'] = data.get('name') or "Someone"
        return User(**data)

class PostDocumentSchema(DocumentSchema):
    """posts/{postId}"""
    post_id = fields.Str(required=True, data_key='id')
    posted_by = fields.Str(required=True, data_key='postedBy', validate=validate.Length(min=1))
    title = fields.Str(load_default="")
    location = CoordinateField(required=True)
    status = fields.Str(load_default=PostStatus.AVAILABLE.value)
    created_at = TimestampField(data_key='createdAt', load_default=None, allow_none=True)
    expiry = TimestampField(load_default=None, allow_none=True)

    @post_load
    def make_post(self, data, **kwargs):
        return Post(**data)

class ClaimDocumentSchema(DocumentSchema):
    """claims/{claimId}"""
    claim_id = fields.Str(required=True, data_key='id')
    post_id = fields.Str(required=True, data_key='postId')
    claimer_id = fields.Str(required=True, data_key='claimerId')
    creator_id = fields.Str(required=True, data_key='creatorId')
    status = fields.Str(load_default="pending")

    @post_load
    def make_claim(self, data, **kwargs):
        return Claim(**data)

class ChatDocumentSchema(DocumentSchema):
    """chats/{chatId}"""
    chat_id = fields.Str(required=True, data_key='id')
    participants = fields.List(fields.Str(), load_default=list)
    post_id = fields.Str(data_key='postId', load_default="", allow_none=True)
    post_title = fields.Str(data_key='postTitle', load_default="", allow_none=True)

    @post_load
    def make_chat(self, data, **kwargs):
        data['post_id'] = data.get('post_id') or ""
        data['post_title'] = data.get('post_title') or ""
        return Chat(**data)

class MessageDocumentSchema(DocumentSchema):
    """chats/{chatId}/messages/{messageId}"""
    message_id = fields.Str(required=True, data_key='id')
    sender_id = fields.Str(data_key='senderId', load_default="")
    content = fields.Str(load_default="", allow_none=True)

    @pre_load
    def fallback_sender(self, data, **kwargs):
        """이전 버전 앱은 발신자를 'sender' 필드에 저장했습니다."""
        if not data.get('senderId') and data.get('sender'):
            data = dict(data)
            data['senderId'] = data['sender']
        return data

    @post_load
    def make_message(self, data, **kwargs):
        data['content'] = data.get('content') or ""
        return Message(**data)

class RatingDocumentSchema(DocumentSchema):
    """ratings/{ratingId}"""
    rating_id = fields.Str(required=True, data_key='id')
    from_user_id = fields.Str(required=True, data_key='fromUserId')
    to_user_id = fields.Str(required=True, data_key='toUserId')
    post_id = fields.Str(data_key='postId', load_default="")
    rating = fields.Float(required=True, validate=validate.Range(min=0, max=5))
    review = fields.Str(load_default=None, allow_none=True)

    @post_load
    def make_rating(self, data, **kwargs):
        return Rating(**data)

class TestNotificationDocumentSchema(DocumentSchema):
    """test_notifications/{testId}"""
    test_id = fields.Str(required=True, data_key='id')
    fcm_token = fields.Str(data_key='fcmToken', load_default=None, allow_none=True)

# --- 로더 ---

def load_document(schema: Schema, doc_id: str, data: Optional[Mapping], path: Optional[str] = None) -> Any:
    """
    문서 데이터를 스키마로 검증/변환합니다.

    :param schema: 사용할 스키마 인스턴스
    :param doc_id: 문서 ID ('id' 키로 주입됨)
    :param data: Firestore에서 읽은 문서 데이터
    :param path: 오류 메시지에 표시할 문서 경로
    :raises MalformedTriggerPayloadError: 데이터가 없거나 필수 필드가 누락/잘못된 경우
    """
    path = path or doc_id
    if data is None:
        raise MalformedTriggerPayloadError(path, "문서 데이터가 없습니다.")

    payload = dict(data)
    payload['id'] = doc_id
    try:
        return schema.load(payload)
    except ValidationError as err:
        raise MalformedTriggerPayloadError(path, err.messages) from err
