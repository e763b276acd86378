from typing import List, Optional
from pydantic import BaseModel, Field, EmailStr


# --- Shared ---
class MessageResponse(BaseModel):
    success: bool = True
    message: str


# --- Auth ---
class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    company_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    first_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    postal_code: Optional[str] = None
    address: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdate(BaseModel):
    email: Optional[EmailStr] = None
    company_name: Optional[str] = None
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    phone: Optional[str] = None
    postal_code: Optional[str] = None
    address: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str = ""
    new_password: str = ""


class AdminLoginRequest(BaseModel):
    username: str
    password: str


# --- Shipping address ---
class ShippingAddressIn(BaseModel):
    label: Optional[str] = None
    postal_code: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    is_default: bool = False


# --- Product ---
class ProductCreate(BaseModel):
    name: Optional[str] = None
    flavor: Optional[str] = None
    price: Optional[int] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    catch_copy: Optional[str] = None
    min_quantity: Optional[int] = None
    quantity_step: Optional[int] = None
    is_active: Optional[bool] = True


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    flavor: Optional[str] = None
    price: Optional[int] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    catch_copy: Optional[str] = None
    min_quantity: Optional[int] = None
    quantity_step: Optional[int] = None
    is_active: Optional[bool] = None


# --- Order ---
class OrderCreate(BaseModel):
    product_id: Optional[int] = None
    shipping_address_id: Optional[int] = None
    quantity: Optional[int] = None


class OrderCreated(BaseModel):
    success: bool = True
    order_id: int
    total_price: int
    message: str = "Your order has been received"


class StatusUpdate(BaseModel):
    status: Optional[str] = None


class PaymentUpdate(BaseModel):
    payment_confirmed: Optional[bool] = None
    payment_date: Optional[str] = None


# --- Dashboard ---
class DashboardSummary(BaseModel):
    current_month_sales: int
    last_month_sales: int
    growth_rate: float
    current_month_orders: int
    current_month_quantity: int
    total_orders: int
    active_products: int


class TrendPoint(BaseModel):
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    sales: int


class RankingEntry(BaseModel):
    product_id: int
    name: str
    total_quantity: int
    total_sales: int


class DashboardResponse(BaseModel):
    target_month: str
    summary: DashboardSummary
    sales_trend: List[TrendPoint]
    product_ranking: List[RankingEntry]
