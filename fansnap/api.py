import logging
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Header, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .assistant import issue_stream_token
from .auth import Caller, require_admin, require_role, require_self
from .errors import InvalidInputError, NotFoundError, PlatformError, UnauthenticatedError
from .models import (
    ChatbotRequest, CreateItemRequest, CreateReferralRequest, EarningRequest,
    LoginRequest, PublishRequest, RegisterRequest, Role, SendMessageRequest,
    SubscribeRequest, TipRequest, User,
)
from .service import PlatformService
from .settings import S

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "invalid_input": status.HTTP_400_BAD_REQUEST,
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "forbidden": status.HTTP_403_FORBIDDEN,
}

app = FastAPI(
    title="Fansnap API",
    description="Subscription content platform: gated posts, store, referrals, messaging and tips",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

platform_service = PlatformService()


def get_service() -> PlatformService:
    return platform_service


@app.exception_handler(PlatformError)
async def platform_error_handler(request: Request, exc: PlatformError) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
        content=exc.to_dict(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(p) for p in err["loc"] if p != "body") for err in exc.errors()]
    error = InvalidInputError("Invalid request body", {"fields": fields})
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.to_dict())


def get_optional_caller(
    x_user_id: Optional[str] = Header(default=None),
    service: PlatformService = Depends(get_service),
) -> Optional[Caller]:
    if not x_user_id:
        return None
    user = service.identity.lookup_by_id(x_user_id)
    if user is None:
        raise UnauthenticatedError("Not authenticated")
    return Caller.from_user(user)


def get_caller(caller: Optional[Caller] = Depends(get_optional_caller)) -> Caller:
    if caller is None:
        raise UnauthenticatedError("Not authenticated")
    return caller


def _creator(service: PlatformService, username: str) -> User:
    creator = service.identity.lookup_by_username(username)
    if creator is None or creator.role != Role.CREATOR:
        raise NotFoundError("Creator not found")
    return creator


def _user(service: PlatformService, username: str) -> User:
    user = service.identity.lookup_by_username(username)
    if user is None:
        raise NotFoundError("User not found")
    return user


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": "fansnap"}


# Authentication and profile

@app.post("/api/register", tags=["Identity"])
async def register(request: RegisterRequest, service: PlatformService = Depends(get_service)):
    user = await service.identity.register(request.username, request.email, request.password, request.role)
    return {"message": "Registered", "user": user}


@app.post("/api/login", tags=["Identity"])
async def login(request: LoginRequest, service: PlatformService = Depends(get_service)):
    user = await service.identity.verify_credential(request.username, request.password)
    return {"message": "Logged in", "user": user}


@app.get("/api/profile", tags=["Identity"])
def get_profile(caller: Caller = Depends(get_caller), service: PlatformService = Depends(get_service)):
    user = service.identity.lookup_by_id(caller.user_id)
    return {"user": {"id": user.id, "username": user.username, "role": user.role, "profile": user.profile}}


@app.put("/api/profile", tags=["Identity"])
def update_profile(
    fields: dict[str, Any] = Body(...),
    caller: Caller = Depends(get_caller),
    service: PlatformService = Depends(get_service),
):
    profile = service.identity.update_profile(caller.user_id, fields)
    return {"message": "Profile updated", "profile": profile}


# Content and subscriptions

@app.post("/api/posts", tags=["Content"])
def publish_post(
    request: PublishRequest,
    caller: Caller = Depends(get_caller),
    service: PlatformService = Depends(get_service),
):
    require_role(caller, Role.CREATOR, "Only creators can post")
    post = service.content.publish(
        caller.user_id, request.content, request.type, request.price,
        request.subscriber_only, request.tags,
    )
    return {"post": post}


@app.get("/api/posts/{creator_username}", tags=["Content"])
def list_posts(
    creator_username: str,
    caller: Optional[Caller] = Depends(get_optional_caller),
    service: PlatformService = Depends(get_service),
):
    creator = _creator(service, creator_username)
    requester_id = caller.user_id if caller else None
    return {"posts": service.content.list_by_creator(creator.id, requester_id)}


@app.post("/api/subscribe/{creator_username}", tags=["Subscriptions"])
def subscribe(
    creator_username: str,
    request: Optional[SubscribeRequest] = None,
    caller: Caller = Depends(get_caller),
    service: PlatformService = Depends(get_service),
):
    creator = _creator(service, creator_username)
    plan = request.plan if request else None
    subscription = service.subscriptions.subscribe(caller.user_id, creator.id, plan)
    return {"subscription": subscription}


@app.get("/api/subscriptions", tags=["Subscriptions"])
def list_subscriptions(caller: Caller = Depends(get_caller), service: PlatformService = Depends(get_service)):
    return {"subscriptions": service.subscriptions.list_by_subscriber(caller.user_id)}


@app.post("/api/subscriptions/{subscription_id}/cancel", tags=["Subscriptions"])
def cancel_subscription(
    subscription_id: str,
    caller: Caller = Depends(get_caller),
    service: PlatformService = Depends(get_service),
):
    subscription = service.subscriptions.get(subscription_id)
    if subscription is None:
        raise NotFoundError(f"Subscription {subscription_id} not found")
    require_self(caller, subscription.subscriber_id, "Not your subscription")
    return {"subscription": service.subscriptions.cancel(subscription_id)}


# Store and orders

@app.post("/api/store/{creator_username}", tags=["Store"])
def create_store_item(
    creator_username: str,
    request: CreateItemRequest,
    caller: Caller = Depends(get_caller),
    service: PlatformService = Depends(get_service),
):
    creator = service.identity.lookup_by_username(creator_username)
    require_self(caller, creator.id if creator else "", "Not authorised to add items")
    item = service.commerce.create_item(caller.user_id, request.name, request.description, request.price)
    return {"item": item}


@app.get("/api/store/{creator_username}", tags=["Store"])
def list_store_items(creator_username: str, service: PlatformService = Depends(get_service)):
    creator = service.identity.lookup_by_username(creator_username)
    if creator is None:
        raise NotFoundError("Creator not found")
    return {"items": service.commerce.list_items(creator.id)}


@app.post("/api/order/{item_id}", tags=["Store"])
def place_order(item_id: str, caller: Caller = Depends(get_caller), service: PlatformService = Depends(get_service)):
    return {"order": service.commerce.place_order(item_id, caller.user_id)}


@app.get("/api/orders", tags=["Store"])
def list_orders(caller: Caller = Depends(get_caller), service: PlatformService = Depends(get_service)):
    return {"orders": service.commerce.list_orders_by_buyer(caller.user_id)}


# Affiliate / referral

@app.post("/api/referral", tags=["Referrals"])
def create_referral(
    request: CreateReferralRequest,
    caller: Caller = Depends(get_caller),
    service: PlatformService = Depends(get_service),
):
    referral = service.referrals.create_code(
        request.creator_id or caller.user_id, caller.user_id, request.code, request.commission,
    )
    return {"referral": referral}


@app.post("/api/referral/{code}/signup", tags=["Referrals"])
def record_referral_signup(code: str, service: PlatformService = Depends(get_service)):
    return {"referral": service.referrals.record_signup(code)}


@app.post("/api/referral/{code}/earn", tags=["Referrals"])
def record_referral_earning(code: str, request: EarningRequest, service: PlatformService = Depends(get_service)):
    return {"referral": service.referrals.record_earning(code, request.amount)}


@app.get("/api/referral/{code}/earnings", tags=["Referrals"])
def referral_earning_history(code: str, caller: Caller = Depends(get_caller), service: PlatformService = Depends(get_service)):
    referral = service.referrals.lookup_by_code(code)
    if referral is None:
        raise NotFoundError("Referral code not found")
    if caller.role != Role.ADMIN:
        require_self(caller, referral.affiliate_id, "Not your referral code")
    return {"referral": referral, "earnings": service.referrals.earning_history(code)}


# Messaging

@app.post("/api/message/send", tags=["Messaging"])
def send_message(
    request: SendMessageRequest,
    caller: Caller = Depends(get_caller),
    service: PlatformService = Depends(get_service),
):
    recipient = service.identity.lookup_by_username(request.recipient_username)
    if recipient is None:
        raise NotFoundError("Recipient not found")
    return {"message": service.messages.send(caller.user_id, recipient.id, request.content)}


@app.get("/api/message/conversations", tags=["Messaging"])
def list_conversations(caller: Caller = Depends(get_caller), service: PlatformService = Depends(get_service)):
    return {"conversations": service.conversation_partners(caller.user_id)}


@app.get("/api/message/thread/{username}", tags=["Messaging"])
def message_thread(username: str, caller: Caller = Depends(get_caller), service: PlatformService = Depends(get_service)):
    other = _user(service, username)
    return {"messages": service.messages.thread_between(caller.user_id, other.id)}


# Tips

@app.post("/api/tip/{creator_username}", tags=["Tips"])
def send_tip(
    creator_username: str,
    request: TipRequest,
    caller: Caller = Depends(get_caller),
    service: PlatformService = Depends(get_service),
):
    creator = _creator(service, creator_username)
    return {"tip": service.tips.send(caller.user_id, creator.id, request.amount)}


@app.get("/api/tips/{creator_username}", tags=["Tips"])
def list_tips(creator_username: str, service: PlatformService = Depends(get_service)):
    creator = _creator(service, creator_username)
    return {"tips": service.tips.received_by(creator.id), "total": service.tips.total_received(creator.id)}


# Search

@app.get("/api/search/users", tags=["Search"])
def search_users(q: str = "", service: PlatformService = Depends(get_service)):
    return {"results": service.search.search_users(q)}


@app.get("/api/search/posts", tags=["Search"])
def search_posts(q: str = "", service: PlatformService = Depends(get_service)):
    return {"results": service.search.search_posts(q)}


# External provider placeholders

@app.post("/api/chatbot/respond", tags=["Extras"])
def chatbot_respond(
    request: ChatbotRequest,
    caller: Caller = Depends(get_caller),
    service: PlatformService = Depends(get_service),
):
    return {"reply": service.assistant.respond(request.message)}


@app.get("/api/live/token", tags=["Extras"])
def live_token(caller: Caller = Depends(get_caller)):
    return {"token": issue_stream_token(), "note": "This is a dummy stream token. Integrate with your streaming provider."}


# Admin

@app.get("/api/admin/users", tags=["Admin"])
def admin_list_users(caller: Caller = Depends(get_caller), service: PlatformService = Depends(get_service)):
    require_admin(caller)
    return {"users": service.identity.list_users()}


@app.delete("/api/admin/posts/{post_id}", tags=["Admin"])
def admin_delete_post(post_id: str, caller: Caller = Depends(get_caller), service: PlatformService = Depends(get_service)):
    require_admin(caller)
    if not service.content.delete_by_id(post_id):
        raise NotFoundError("Post not found")
    return {"message": "Post deleted"}


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=S.log_level)
    uvicorn.run(app, host="0.0.0.0", port=8000)
