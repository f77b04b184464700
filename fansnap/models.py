from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, ConfigDict


class Role(str, Enum):
    CREATOR = "creator"
    SUBSCRIBER = "subscriber"
    ADMIN = "admin"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class OrderStatus(str, Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


class Profile(BaseModel):
    bio: str = ""
    profile_picture: str = ""
    banner: str = ""
    social_links: dict[str, Any] = Field(default_factory=dict)
    subscription_plans: list[Any] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class User(BaseModel):
    id: str
    username: str
    email: str
    credential_secret: str = Field(..., repr=False)
    role: Role
    created_at: datetime
    profile: Profile

    model_config = ConfigDict(from_attributes=True)

    def public(self) -> "PublicUser":
        return PublicUser(id=self.id, username=self.username, role=self.role)


class PublicUser(BaseModel):
    id: str
    username: str
    role: Role


class UserSummary(PublicUser):
    email: str
    created_at: datetime


class Post(BaseModel):
    id: str
    creator_id: str
    content: str
    type: str = "text"
    price: Decimal = Decimal("0")
    subscriber_only: bool = False
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    likes: int = 0
    views: int = 0

    model_config = ConfigDict(from_attributes=True)


class Subscription(BaseModel):
    id: str
    subscriber_id: str
    creator_id: str
    plan: str
    status: SubscriptionStatus
    created_at: datetime
    cancelled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def can_cancel(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE


class StoreItem(BaseModel):
    id: str
    creator_id: str
    name: str
    description: str = ""
    price: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Order(BaseModel):
    id: str
    item_id: str
    buyer_id: str
    status: OrderStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Referral(BaseModel):
    id: str
    creator_id: str
    affiliate_id: str
    code: str
    commission: Decimal
    signups: int = 0
    earnings: Decimal = Decimal("0")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReferralEarning(BaseModel):
    id: str
    referral_id: str
    code: str
    amount: Decimal
    commission: Decimal
    credited: Decimal
    earnings_after: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Message(BaseModel):
    id: str
    sender_id: str
    recipient_id: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Tip(BaseModel):
    id: str
    sender_id: str
    recipient_id: str
    amount: Decimal
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Request bodies for the HTTP layer

class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: Role = Role.SUBSCRIBER

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "username": "ana",
            "email": "ana@example.com",
            "password": "correct horse battery staple",
            "role": "creator"
        }
    })


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class PublishRequest(BaseModel):
    content: str
    type: str = "text"
    price: Any = 0
    subscriber_only: bool = Field(default=False, alias="subscriberOnly")
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class SubscribeRequest(BaseModel):
    plan: Optional[str] = None


class CreateItemRequest(BaseModel):
    name: str
    description: str = ""
    price: Any = None


class CreateReferralRequest(BaseModel):
    code: str = Field(..., description="Public referral code, unique across the platform")
    creator_id: Optional[str] = Field(default=None, alias="creatorId")
    commission: Any = None

    model_config = ConfigDict(populate_by_name=True)


class EarningRequest(BaseModel):
    amount: Any = None


class SendMessageRequest(BaseModel):
    recipient_username: str = Field(..., alias="recipientUsername")
    content: str

    model_config = ConfigDict(populate_by_name=True)


class TipRequest(BaseModel):
    amount: Any = None


class ChatbotRequest(BaseModel):
    message: str = Field(..., min_length=1)
