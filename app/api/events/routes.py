# app/api/events/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from app.api.events.schemas import TriggerEventSchema, TriggerEventResponseSchema

events_bp = Blueprint('events_bp', __name__)

@events_bp.route('', methods=['POST'])
def receive_event():
    """
    Firestore 문서 변경 이벤트를 받아 알림 핸들러로 전달합니다.
    - 핸들러는 fire-and-forget이므로 처리 결과와 관계없이 202 Accepted를 반환합니다.
    - 등록되지 않은 경로/유형이면 routed=false로 응답합니다.
    """
    router = current_app.services['triggers']
    try:
        data = TriggerEventSchema().load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    routed = router.route(
        kind=data['kind'],
        document_path=data['document'],
        before=data.get('before'),
        after=data.get('after'),
        event_id=data.get('event_id'),
    )
    if not routed:
        logging.info(f"처리할 핸들러가 없는 이벤트입니다: {data['kind']} {data['document']}")

    response = {"routed": routed, "document": data['document'], "kind": data['kind']}
    return jsonify(TriggerEventResponseSchema().dump(response)), 202

@events_bp.route('/health', methods=['GET'])
def health():
    """배포 환경의 liveness probe"""
    return jsonify({"status": "ok", "triggers": len(current_app.services['triggers'].routes)}), 200
