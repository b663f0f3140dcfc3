# app/core/config.py

import os # 'os' 모듈: 환경 변수를 읽기 위해 사용합니다.

class Config:
    """모든 환경 설정의 기반이 되는 공통 설정 클래스입니다."""
    # 서비스 계정 키 파일 경로. 비어 있으면 실행 환경의 기본 자격 증명(ADC)을 사용합니다.
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')

    # 새 게시물 알림을 받을 사용자의 최대 거리 (km, 경계 포함)
    NEARBY_RADIUS_KM = float(os.getenv('NEARBY_RADIUS_KM', '20.0'))
    # 앱에서 생성하는 Android 알림 채널 ID와 일치해야 합니다.
    NOTIFICATION_CHANNEL_ID = os.getenv('NOTIFICATION_CHANNEL_ID', 'zerowaste_channel')
    # 한 번의 fan-out에서 동시에 FCM으로 보내는 최대 요청 수
    DISPATCH_MAX_WORKERS = int(os.getenv('DISPATCH_MAX_WORKERS', '10'))
    # 채팅 알림 본문에 표시할 메시지 미리보기 길이
    MESSAGE_PREVIEW_LENGTH = int(os.getenv('MESSAGE_PREVIEW_LENGTH', '50'))
    # true이면 FCM이 메시지를 검증만 하고 기기로 전달하지 않습니다. (스테이징 점검용)
    FCM_DRY_RUN = os.getenv('FCM_DRY_RUN', 'false').lower() == 'true'

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

class DevelopmentConfig(Config):
    """개발 환경을 위한 설정 클래스입니다."""
    DEBUG = True
    # 개발용 Firebase 프로젝트에 연결하기 위한 서비스 계정 키 파일 경로
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH', Config.FIREBASE_CREDENTIALS_PATH)

class TestingConfig(Config):
    """테스트 환경을 위한 설정 클래스입니다."""
    TESTING = True
    DEBUG = False
    FCM_DRY_RUN = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')

class ProductionConfig(Config):
    """Cloud Functions / Cloud Run 배포 환경을 위한 설정 클래스입니다."""
    DEBUG = False

# config_by_name: 문자열 키와 해당 환경의 설정 클래스를 매핑하는 딕셔너리입니다.
# create_app(FLASK_ENV)과 main.py(APP_ENV)에서 적절한 설정을 선택하는 데 사용됩니다.
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig
)

def load_settings(config_name: str) -> dict:
    """
    설정 클래스의 대문자 속성만 모아 딕셔너리로 반환합니다. (Flask의 Config.from_object와 같은 규칙)
    Flask 앱 없이 실행되는 Cloud Functions 진입점(main.py)에서 사용합니다.
    """
    config_class = config_by_name[config_name]
    return {key: getattr(config_class, key) for key in dir(config_class) if key.isupper()}
