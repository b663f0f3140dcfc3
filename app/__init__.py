# app/__init__.py

# =====================================================================================
# 1. 환경 변수 로드 (가장 먼저 실행)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 모듈 임포트 (Module Imports)
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
import firebase_admin
from firebase_admin import credentials, firestore

# - 설정
from app.core.config import config_by_name

# - API 블루프린트
from app.api.events.routes import events_bp

# - 알림 파이프라인
from app.triggers.router import build_trigger_router

LOG_FORMAT = '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'

def init_firebase(cred_path=None):
    """
    firebase_admin 기본 앱을 한 번만 초기화합니다.
    - 서비스 계정 키 경로가 있으면 해당 키를, 없으면 실행 환경의 기본 자격 증명을 사용합니다.
    """
    if firebase_admin._apps:
        return firebase_admin.get_app()

    if cred_path:
        if not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 인증 파일을 찾을 수 없습니다: {cred_path}")
        return firebase_admin.initialize_app(credentials.Certificate(cred_path))
    return firebase_admin.initialize_app()

def create_app(config_name=None, router=None):
    """
    Flask 애플리케이션 팩토리 함수.

    :param config_name: 'development' | 'testing' | 'production' (기본값: FLASK_ENV)
    :param router: 미리 구성된 TriggerRouter. 주어지면 Firebase 초기화를 건너뜁니다. (테스트용)
    """
    # =====================================================================================
    # 3. Flask 앱 생성 및 기본 설정
    # =====================================================================================
    config_name = config_name or os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. 외부 서비스 초기화 및 'app.services'에 저장 (의존성 주입)
    # =====================================================================================
    app.services = {}

    if router is None:
        try:
            init_firebase(app.config.get('FIREBASE_CREDENTIALS_PATH'))
            router = build_trigger_router(firestore.client(), app.config)
            logging.info("Notification trigger router initialized successfully")
        except Exception as e:
            logging.error(f"Failed to initialize notification pipeline: {e}")
            raise
    app.services['triggers'] = router

    # =====================================================================================
    # 5. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(events_bp, url_prefix='/api/events')

    # =====================================================================================
    # 6. 전역 에러 핸들러 설정
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        response = {"error_code": "VALIDATION_ERROR", "details": err.messages}
        return jsonify(response), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        if isinstance(err, HTTPException):
            return err
        # 다른 핸들러에서 처리되지 않은 모든 예외를 여기서 처리
        logging.error(f"An unhandled exception occurred: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 7. 로깅 및 앱 반환
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'), format=LOG_FORMAT)

    logging.info(f"Flask app created for '{config_name}' environment.")

    return app
