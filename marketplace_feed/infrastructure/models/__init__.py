"""ORM models used by the application infrastructure."""

from .announcement import AnnouncementModel
from .booking import BookingModel
from .booking_modification import BookingModificationModel
from .conversation import ConversationModel
from .favorite import FavoriteModel
from .listing import ListingModel
from .moderation_action import ModerationActionModel
from .notification import NotificationModel
from .payment_log import PaymentLogModel
from .payout_request import PayoutRequestModel
from .profile import ProfileModel
from .refund import RefundModel
from .review import ReviewModel
from .support_ticket import SupportTicketModel
from .user_status_history import UserStatusHistoryModel

__all__ = [
    "AnnouncementModel",
    "BookingModel",
    "BookingModificationModel",
    "ConversationModel",
    "FavoriteModel",
    "ListingModel",
    "ModerationActionModel",
    "NotificationModel",
    "PaymentLogModel",
    "PayoutRequestModel",
    "ProfileModel",
    "RefundModel",
    "ReviewModel",
    "SupportTicketModel",
    "UserStatusHistoryModel",
]
