# app/api/events/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError

from app.triggers.events import MutationKind

class TriggerEventSchema(Schema):
    """
    POST /api/events 요청 본문의 유효성을 검사합니다.
    Firestore 변경 이벤트를 HTTP로 중계하는 어댑터(Eventarc push 등)가 사용합니다.
    """
    event_id = fields.Str(load_default=None, allow_none=True)
    kind = fields.Str(required=True, validate=validate.OneOf([k.value for k in MutationKind]))
    document = fields.Str(required=True, validate=validate.Length(min=1))
    before = fields.Dict(keys=fields.Str(), load_default=None, allow_none=True)
    after = fields.Dict(keys=fields.Str(), load_default=None, allow_none=True)

    @validates_schema
    def validate_snapshots(self, data, **kwargs):
        """생성/수정 이벤트에는 변경 후 문서가 반드시 있어야 합니다."""
        if data.get('after') is None:
            raise ValidationError("'after' 문서가 필요합니다.", 'after')
        if data.get('kind') == MutationKind.UPDATED.value and data.get('before') is None:
            raise ValidationError("수정 이벤트에는 'before' 문서가 필요합니다.", 'before')

class TriggerEventResponseSchema(Schema):
    routed = fields.Bool(required=True)
    document = fields.Str(required=True)
    kind = fields.Str(required=True)
