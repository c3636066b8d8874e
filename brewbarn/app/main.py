#!/usr/bin/env python3
"""
Main FastAPI application for the Brew Barn storefront and virtual barista.
"""

from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from .cart import CartService, cart_total
from .config import Config
from .controller import Controller
from .drinks import DrinkService
from .errors import NotFoundError, StorefrontError
from .notifications import EmailNotifier, NotificationError
from .profiles import ProfileService
from .reviews import ReviewService
from .rewards import RewardService
from .session import GuestCartStore
from ..data.database import get_db
from ..data.menu_store import MenuStore
from ..data.models import Profile
from ..data.populate_db import populate_menu
from ..data.repository import StoreRepository
from ..schemas.io_models import BaristaRequest
from ..schemas.order_models import (CartItemCreate, CartItemOut, CartItemUpdate, CartOut, CheckoutRequest,
                                    CheckoutResponse, CustomDrinkCreate, CustomDrinkOut, DrinkAddonOut,
                                    GuestCheckoutRequest, LeaderboardEntry, MenuItemOut, NotificationResult,
                                    OrderItemOut, OrderOut, ProfileOut, ProfileUpdate, ReviewCreate,
                                    ReviewSummary, RewardNotificationRequest, RewardStatus)
from ..utils.logger import get_logger

logger = get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    Config.debug_print()
    populate_menu()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="Brew Barn API",
    description="Coffee-shop storefront with a virtual barista",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your frontend domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize components
controller = Controller()
guest_carts = GuestCartStore()
notifier = EmailNotifier()


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


def get_guest_id(x_guest_id: Optional[str] = Header(None)) -> str:
    if not x_guest_id:
        raise HTTPException(status_code=401, detail="Missing X-Guest-Id header")
    return x_guest_id


def _order_out(order) -> OrderOut:
    return OrderOut(
        id=order.id,
        total_amount=order.total_amount,
        status=order.status.value if hasattr(order.status, "value") else order.status,
        discount_code=order.discount_code,
        created_at=order.created_at,
        items=[OrderItemOut(product_name=i.product_name, quantity=i.quantity, price=i.price, size=i.size)
               for i in order.items],
    )


def _checkout_out(result) -> CheckoutResponse:
    return CheckoutResponse(
        order=_order_out(result["order"]),
        reward=result["reward"],
        discount_applied=result["discount_applied"],
        discount_note=result["discount_note"],
    )


def _send_quietly(to: Optional[str], kind: str, **kwargs):
    """Best-effort e-mail: failures are logged, never returned to the caller."""
    try:
        notifier.send(to, kind, **kwargs)
    except NotificationError as e:
        logger.error(f"[EMAIL] {kind} e-mail failed: {e}")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# ---------------------------------------------------------------- barista

@app.post("/virtual-barista")
async def virtual_barista(request: Request, db: Session = Depends(get_db)):
    """
    Chat with the virtual barista.

    Every failure, whether configuration, input or provider, is answered with
    a single ``{"error": ...}`` body and status 500.
    """
    try:
        body = await request.json()
        barista_request = BaristaRequest.model_validate(body or {})
        result = await run_in_threadpool(controller.handle_query, barista_request, StoreRepository(db))
        return JSONResponse(content=result.model_dump(mode="json", by_alias=True, exclude_none=True))
    except Exception as e:
        logger.error(f"[BARISTA] Error in virtual-barista: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": str(e) or "An error occurred while processing your request"},
        )


# ---------------------------------------------------------------- menu

@app.get("/menu", response_model=List[MenuItemOut])
def list_menu(category: Optional[str] = None, db: Session = Depends(get_db)):
    return MenuStore(db).list_with_ratings(category)


# ---------------------------------------------------------------- cart

def _cart_out(items, profile_incomplete: bool = False) -> CartOut:
    out = []
    for i in items:
        if isinstance(i, dict):
            out.append(CartItemOut(id=str(i["id"]), product_name=i["product_name"], price=i["price"],
                                   quantity=i["quantity"], size=i.get("size")))
        else:
            out.append(CartItemOut(id=str(i.id), product_name=i.product_name, price=i.price,
                                   quantity=i.quantity, size=i.size))
    return CartOut(items=out, total=cart_total(items), profile_incomplete=profile_incomplete)


@app.get("/cart", response_model=CartOut)
def get_cart(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return _cart_out(CartService(db).list_items(user_id))


@app.post("/cart", response_model=CartOut)
def add_to_cart(item: CartItemCreate, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    service = CartService(db)
    service.add_item(user_id, item.product_name, item.quantity, item.size)
    return _cart_out(service.list_items(user_id), service.profile_incomplete(user_id))


@app.put("/cart/{item_id}", response_model=CartOut)
def update_cart_item(item_id: int, update: CartItemUpdate, user_id: str = Depends(get_user_id),
                     db: Session = Depends(get_db)):
    service = CartService(db)
    service.update_quantity(user_id, item_id, update.quantity)
    return _cart_out(service.list_items(user_id))


@app.delete("/cart/{item_id}", response_model=CartOut)
def remove_cart_item(item_id: int, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    service = CartService(db)
    service.remove_item(user_id, item_id)
    return _cart_out(service.list_items(user_id))


@app.delete("/cart", response_model=CartOut)
def clear_cart(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    service = CartService(db)
    service.clear(user_id)
    return _cart_out([])


@app.post("/checkout", response_model=CheckoutResponse)
def checkout(request: Optional[CheckoutRequest] = None, user_id: str = Depends(get_user_id),
             db: Session = Depends(get_db)):
    discount = request.discount if request else None
    result = CartService(db).checkout(user_id, discount)
    reward = result["reward"]
    if reward["upgraded"]:
        profile = db.get(Profile, user_id)
        if profile is not None:
            _send_quietly(profile.email, "tier_upgrade", name=profile.full_name, new_tier=reward["tier"])
    return _checkout_out(result)


@app.get("/orders", response_model=List[OrderOut])
def list_orders(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return [_order_out(o) for o in StoreRepository(db).get_order_rows(user_id)]


# ---------------------------------------------------------------- guest cart

@app.get("/guest/cart", response_model=CartOut)
def get_guest_cart(guest_id: str = Depends(get_guest_id)):
    return _cart_out(guest_carts.get_items(guest_id))


@app.post("/guest/cart", response_model=CartOut)
def add_to_guest_cart(item: CartItemCreate, guest_id: str = Depends(get_guest_id),
                      db: Session = Depends(get_db)):
    menu_item = CartService(db).resolve_product(item.product_name)
    guest_carts.add_item(guest_id, menu_item.name, menu_item.price, item.quantity, item.size)
    return _cart_out(guest_carts.get_items(guest_id))


@app.put("/guest/cart/{item_id}", response_model=CartOut)
def update_guest_cart_item(item_id: str, update: CartItemUpdate, guest_id: str = Depends(get_guest_id)):
    if not guest_carts.update_quantity(guest_id, item_id, update.quantity):
        raise NotFoundError("Item not found")
    return _cart_out(guest_carts.get_items(guest_id))


@app.delete("/guest/cart/{item_id}", response_model=CartOut)
def remove_guest_cart_item(item_id: str, guest_id: str = Depends(get_guest_id)):
    if not guest_carts.remove_item(guest_id, item_id):
        raise NotFoundError("Item not found")
    return _cart_out(guest_carts.get_items(guest_id))


@app.post("/guest/checkout", response_model=CheckoutResponse)
def guest_checkout(request: GuestCheckoutRequest, guest_id: str = Depends(get_guest_id),
                   db: Session = Depends(get_db)):
    details = request.model_dump(exclude={"discount"})
    result = CartService(db).guest_checkout(guest_carts, guest_id, details, request.discount)
    return _checkout_out(result)


# ---------------------------------------------------------------- rewards

@app.get("/rewards", response_model=RewardStatus)
def get_rewards(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return RewardService(db).status(user_id)


@app.get("/rewards/leaderboard", response_model=List[LeaderboardEntry])
def get_leaderboard(db: Session = Depends(get_db)):
    return RewardService(db).leaderboard()


# ---------------------------------------------------------------- custom drinks

def _drink_out(drink) -> CustomDrinkOut:
    return CustomDrinkOut(
        id=drink.id, name=drink.name, base_drink=drink.base_drink, milk_type=drink.milk_type,
        sweetness_level=drink.sweetness_level,
        addons=[DrinkAddonOut(addon_type=a.addon_type.value, addon_name=a.addon_name) for a in drink.addons],
    )


@app.get("/custom-drinks", response_model=List[CustomDrinkOut])
def list_custom_drinks(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return [_drink_out(d) for d in DrinkService(db).list_drinks(user_id)]


@app.post("/custom-drinks", response_model=CustomDrinkOut)
def save_custom_drink(spec: CustomDrinkCreate, user_id: str = Depends(get_user_id),
                      db: Session = Depends(get_db)):
    return _drink_out(DrinkService(db).save(user_id, spec))


@app.delete("/custom-drinks/{drink_id}")
def delete_custom_drink(drink_id: int, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    DrinkService(db).delete(user_id, drink_id)
    return {"message": "Drink deleted"}


# ---------------------------------------------------------------- reviews

@app.get("/reviews/{product_name}", response_model=ReviewSummary)
def get_reviews(product_name: str, db: Session = Depends(get_db)):
    return ReviewService(db).summary(product_name)


@app.post("/reviews/{product_name}")
def submit_review(product_name: str, review: ReviewCreate, user_id: str = Depends(get_user_id),
                  db: Session = Depends(get_db)):
    message = ReviewService(db).submit(user_id, product_name, review.rating, review.comment)
    return {"message": message}


@app.delete("/reviews/{product_name}")
def delete_review(product_name: str, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return {"message": ReviewService(db).delete(user_id, product_name)}


# ---------------------------------------------------------------- profile

def _profile_out(profile) -> ProfileOut:
    return ProfileOut(**{field: getattr(profile, field) for field in ProfileOut.model_fields})


@app.get("/profile", response_model=ProfileOut)
def get_profile(user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    return _profile_out(ProfileService(db).get(user_id))


@app.put("/profile", response_model=ProfileOut)
def update_profile(update: ProfileUpdate, user_id: str = Depends(get_user_id), db: Session = Depends(get_db)):
    profile, created = ProfileService(db).upsert(user_id, update.model_dump(exclude_unset=True))
    if created:
        _send_quietly(profile.email, "welcome", name=profile.full_name)
    return _profile_out(profile)


# ---------------------------------------------------------------- notifications

@app.post("/notifications/reward", response_model=NotificationResult)
def send_reward_notification(request: RewardNotificationRequest, db: Session = Depends(get_db)):
    profile = db.get(Profile, request.user_id)
    if profile is None:
        raise NotFoundError("Profile not found")
    try:
        sent = notifier.send(profile.email, request.type.value, name=profile.full_name,
                             new_tier=request.new_tier, points=request.points)
    except NotificationError as e:
        raise HTTPException(status_code=502, detail=str(e))
    message = "Email sent successfully" if sent else "Email delivery is not configured"
    return NotificationResult(sent=sent, message=message)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
