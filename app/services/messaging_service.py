# app/services/messaging_service.py
import logging
from firebase_admin import messaging
from firebase_admin import exceptions as firebase_exceptions

from app.core.errors import DeliveryError, DeliveryFailureKind, StaleTokenError
from app.models.notification import NotificationJob

class FcmPushService:
    """
    Firebase Cloud Messaging(FCM)으로 푸시 알림 한 건을 보내는 발송 서비스.
    FCM 예외는 DeliveryError 계열로 변환되어, 호출자가 만료 토큰(StaleTokenError)과
    일반 발송 실패를 구분할 수 있습니다.
    """
    def __init__(self, channel_id: str = 'zerowaste_channel', app=None, dry_run: bool = False):
        """
        :param channel_id: 앱이 생성한 Android 알림 채널 ID
        :param app: 사용할 firebase_admin App (None이면 기본 앱)
        :param dry_run: True이면 FCM이 검증만 하고 실제로 전달하지 않습니다.
        """
        self.channel_id = channel_id
        self.app = app
        self.dry_run = dry_run

    def build_message(self, job: NotificationJob) -> messaging.Message:
        """NotificationJob을 Android/iOS 설정이 포함된 FCM 메시지로 변환합니다."""
        return messaging.Message(
            token=job.token,
            notification=messaging.Notification(title=job.title, body=job.body),
            data={key: str(value) for key, value in job.data.items()},
            android=messaging.AndroidConfig(
                notification=messaging.AndroidNotification(
                    channel_id=self.channel_id,
                    priority='high',
                    sound='default',
                ),
            ),
            apns=messaging.APNSConfig(
                payload=messaging.APNSPayload(
                    aps=messaging.Aps(
                        alert=messaging.ApsAlert(title=job.title, body=job.body),
                        badge=1,
                        sound='default',
                    ),
                ),
            ),
        )

    def send(self, job: NotificationJob) -> str:
        """
        푸시 알림 한 건을 발송하고 FCM이 부여한 메시지 ID를 반환합니다.

        :raises StaleTokenError: 토큰이 등록 해제되었거나 다른 발신자 ID에 속한 경우
        :raises DeliveryError: 그 외 발송 실패
        """
        message = self.build_message(job)
        try:
            message_id = messaging.send(message, dry_run=self.dry_run, app=self.app)
        except (messaging.UnregisteredError, messaging.SenderIdMismatchError) as e:
            logging.info(f"FCM 토큰이 유효하지 않습니다. DB에서 제거가 필요합니다 (recipient: {job.recipient_id})")
            raise StaleTokenError(str(e)) from e
        except firebase_exceptions.InvalidArgumentError as e:
            raise DeliveryError(DeliveryFailureKind.INVALID_ARGUMENT, str(e)) from e
        except (firebase_exceptions.UnavailableError, firebase_exceptions.DeadlineExceededError,
                messaging.QuotaExceededError) as e:
            raise DeliveryError(DeliveryFailureKind.UNAVAILABLE, str(e)) from e
        except firebase_exceptions.FirebaseError as e:
            raise DeliveryError(DeliveryFailureKind.UNKNOWN, str(e)) from e

        logging.info(f"FCM 발송 성공: {message_id} ({job.type.value} -> {job.recipient_id})")
        return message_id
