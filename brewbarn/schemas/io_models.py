"""Pydantic models for the virtual barista API and agent contracts.

Wire models use camelCase aliases because the chat widget speaks JSON in
camelCase; Python code uses the snake_case field names.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ActiveCode(CamelModel):
    code: str
    percentage: int
    expiry: datetime
    product_type: Optional[str] = None


class ChatTurn(CamelModel):
    role: str
    content: str


class BaristaRequest(CamelModel):
    # Optional here so a missing message surfaces as a barista error, not a 422
    message: Optional[str] = None
    user_id: Optional[str] = None
    active_codes: List[ActiveCode] = Field(default_factory=list)
    chat_history: List[ChatTurn] = Field(default_factory=list)


class BaristaResponse(CamelModel):
    reply: str
    discount_code: Optional[str] = None
    discount_percentage: Optional[int] = None
    expiry_days: Optional[int] = None
    product_type: Optional[str] = None


class DiscountOffer(CamelModel):
    code: str
    percentage: int
    expiry_days: int
    product_type: Optional[str] = None


# Records read from the store. These replace the loosely shaped rows the
# hosted data layer used to hand back.

class MenuItemRecord(BaseModel):
    name: str
    price: float
    category: str
    description: Optional[str] = None


class OrderItemRecord(BaseModel):
    product_name: str
    quantity: int
    price: float


class OrderRecord(BaseModel):
    id: int
    created_at: datetime
    total_amount: float
    items: List[OrderItemRecord] = Field(default_factory=list)


class ProfileRecord(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    favorite_product: Optional[str] = None


class CustomerContext(BaseModel):
    """Everything the barista knows about the person it is talking to."""
    user_id: Optional[str] = None
    profile: Optional[ProfileRecord] = None
    orders: List[OrderRecord] = Field(default_factory=list)

    @property
    def is_guest(self) -> bool:
        return self.user_id is None


class AgentResult(BaseModel):
    agent: str
    intent: str
    facts: Dict[str, Any]
