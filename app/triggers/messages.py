# app/triggers/messages.py
"""
트리거별 푸시 알림 문구와 data 페이로드를 만드는 함수 모음.
앱은 data.type 값과 ID 필드로 알림을 눌렀을 때 이동할 화면을 결정합니다.
"""
import math
from datetime import datetime

from app.models.chat import Chat, Message
from app.models.claim import Claim, ClaimStatus
from app.models.notification import NotificationJob, NotificationType
from app.models.post import Post
from app.models.rating import Rating
from app.models.user import User
from app.services.proximity_service import NearbyUser
from app.utils.datetime_utils import DateTimeUtils

def preview(content: str, length: int = 50) -> str:
    """length자를 넘는 메시지는 잘라서 '...'을 붙입니다."""
    if len(content) > length:
        return content[:length] + "..."
    return content

def format_rating(value: float) -> str:
    # 4.0 -> '4', 4.5 -> '4.5'
    return f"{value:g}"

def rating_stars(value: float) -> str:
    return "⭐" * int(math.floor(value))

def nearby_food_job(nearby: NearbyUser, author: User, post: Post) -> NotificationJob:
    return NotificationJob.create(
        token=nearby.user.fcm_token,
        title="New food nearby! 📍",
        body=f'{author.name} shared "{post.title}" {nearby.distance_label}km away',
        n_type=NotificationType.NEW_FOOD_NEARBY,
        data={
            "postId": post.post_id,
            "distance": nearby.distance_label,
            "posterId": post.posted_by,
            "postTitle": post.title,
        },
        recipient_id=nearby.user.user_id,
    )

def food_claimed_job(poster: User, claimant: User, claim: Claim, post: Post) -> NotificationJob:
    return NotificationJob.create(
        token=poster.fcm_token,
        title="Someone claimed your food! 🍽️",
        body=f'{claimant.name} wants to claim "{post.title}"',
        n_type=NotificationType.FOOD_CLAIMED,
        data={
            "postId": claim.post_id,
            "claimId": claim.claim_id,
            "claimantId": claim.claimer_id,
            "claimantName": claimant.name,
        },
        recipient_id=poster.user_id,
    )

def claim_update_job(claimant: User, poster_name: str, claim: Claim, post: Post) -> NotificationJob:
    is_accepted = claim.status == ClaimStatus.ACCEPTED.value
    if is_accepted:
        title = "Claim Accepted! 🎉"
        body = f'{poster_name} accepted your claim for "{post.title}"!'
        n_type = NotificationType.CLAIM_ACCEPTED
    else:
        title = "Claim Declined 😔"
        body = f'{poster_name} declined your claim for "{post.title}".'
        n_type = NotificationType.CLAIM_REJECTED

    return NotificationJob.create(
        token=claimant.fcm_token,
        title=title,
        body=body,
        n_type=n_type,
        data={
            "postId": claim.post_id,
            "claimId": claim.claim_id,
            "status": claim.status,
            "postTitle": post.title,
        },
        recipient_id=claimant.user_id,
    )

def new_message_job(receiver: User, sender: User, chat: Chat, message: Message,
                    preview_length: int = 50) -> NotificationJob:
    return NotificationJob.create(
        token=receiver.fcm_token,
        title=f"New message from {sender.name} 💬",
        body=preview(message.content, preview_length),
        n_type=NotificationType.NEW_MESSAGE,
        data={
            "chatId": chat.chat_id,
            "senderId": message.sender_id,
            "senderName": sender.name,
            "postId": chat.post_id,
            "postTitle": chat.post_title,
            "messageId": message.message_id,
        },
        recipient_id=receiver.user_id,
    )

def new_rating_job(receiver: User, giver: User, rating: Rating, post_title: str) -> NotificationJob:
    score = format_rating(rating.rating)
    body = f'{giver.name} rated you {score}/5 {rating_stars(rating.rating)} for "{post_title}"'
    if rating.review:
        body += f': "{rating.review}"'

    return NotificationJob.create(
        token=receiver.fcm_token,
        title="You received a new rating! ⭐",
        body=body,
        n_type=NotificationType.NEW_RATING,
        data={
            "ratingId": rating.rating_id,
            "fromUserId": rating.from_user_id,
            "fromUserName": giver.name,
            "rating": score,
            "postId": rating.post_id,
            "postTitle": post_title,
        },
        recipient_id=receiver.user_id,
    )

def diagnostic_notification_job(token: str, sent_at: datetime) -> NotificationJob:
    return NotificationJob.create(
        token=token,
        title="Test Notification 🧪",
        body="This is a test notification from Cloud Functions!",
        n_type=NotificationType.TEST,
        data={"timestamp": DateTimeUtils.to_iso_string(sent_at)},
    )
