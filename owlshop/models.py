from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class Company(BaseModel):
    name: str
    motto: str


class Customer(BaseModel):
    id: str
    first_name: str
    last_name: str
    gender: str
    email: str
    customer_type: str  # PERSONAL | BUSINESS
    company: Optional[Company] = None
    revision: int = 0
    created_at: datetime
    last_modified_at: datetime


class CustomerRef(BaseModel):
    id: str
    type: str


class Address(BaseModel):
    id: str
    customer: CustomerRef
    type: str  # INVOICE | DELIVERY
    first_name: str
    last_name: str
    state: str
    street: str
    house_number: str
    city: str
    zip: str
    latitude: float
    longitude: float
    phone: str
    additional_address_info: str = ""
    revision: int = 0
    created_at: datetime


class FrontendResponse(BaseModel):
    size: int
    status_code: int


class FrontendEvent(BaseModel):
    version: int = 0
    correlation_id: str
    ip_address: str
    method: str
    requested_url: str
    request_duration_ms: int
    response: FrontendResponse
    headers: Dict[str, str]
    created_at: datetime


class LineItem(BaseModel):
    article_id: str
    name: str
    quantity: int
    quantity_unit: str
    unit_price: int  # cents
    total_price: int  # cents


class Payment(BaseModel):
    payment_id: str
    method: str


class Order(BaseModel):
    id: str
    version: int = 1
    customer: CustomerRef
    order_value: int  # cents
    line_items: List[LineItem]
    payment: Payment
    delivery_address: Address
    created_at: datetime
    last_updated_at: datetime
    revision: int = 0
