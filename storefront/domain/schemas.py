# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

PaymentMethod = Literal["razorpay", "stripe", "cod"]
OrderStatus = Literal["pending", "processing", "confirmed", "shipped", "delivered", "cancelled", "refunded"]
SortKey = Literal["newest", "price-asc", "price-desc", "popular", "rating"]


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =====================================================
# ENVELOPE
# =====================================================
class Pagination(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        total_pages = -(-total // limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_prev_page=page > 1,
        )


class Envelope(ApiModel, Generic[T]):
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None
    pagination: Optional[Pagination] = None


# =====================================================
# USERS
# =====================================================
class UserCreate(ApiModel):
    """Profile pushed by the identity provider."""

    id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    role: Literal["user", "admin"] = "user"


class UserOut(ApiModel):
    id: int
    name: str
    email: str
    role: str
    created_at: datetime


# =====================================================
# CATALOG
# =====================================================
class CategoryCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: bool = True
    sort_order: int = 0


class CategoryOut(ApiModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: bool
    sort_order: int


class InventoryIn(ApiModel):
    quantity: int = Field(0, ge=0)
    low_stock_threshold: int = Field(5, ge=0)
    track_inventory: bool = True
    allow_backorders: bool = False


class ProductCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = None
    description: str = Field(..., min_length=1)
    short_description: Optional[str] = Field(None, max_length=500)
    price: Decimal = Field(..., ge=0)
    compare_price: Optional[Decimal] = Field(None, ge=0)
    category_id: int = Field(..., gt=0)
    sku: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    inventory: InventoryIn = Field(default_factory=InventoryIn)
    is_active: bool = True
    is_featured: bool = False


class ProductUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    short_description: Optional[str] = Field(None, max_length=500)
    price: Optional[Decimal] = Field(None, ge=0)
    compare_price: Optional[Decimal] = Field(None, ge=0)
    category_id: Optional[int] = Field(None, gt=0)
    sku: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = None
    inventory: Optional[InventoryIn] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class InventoryOut(ApiModel):
    quantity: int
    low_stock_threshold: int
    track_inventory: bool
    allow_backorders: bool


class ProductOut(ApiModel):
    id: int
    name: str
    slug: str
    description: str
    short_description: Optional[str] = None
    price: Decimal
    compare_price: Optional[Decimal] = None
    discount_percentage: int
    category_id: int
    sku: str
    tags: List[str]
    inventory: InventoryOut
    stock_status: str
    rating_average: float
    rating_count: int
    is_active: bool
    is_featured: bool
    created_at: datetime


class ProductFilter(ApiModel):
    category: Optional[int] = None
    search: Optional[str] = None
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    rating: Optional[float] = Field(None, ge=0, le=5)
    featured: bool = False
    in_stock: bool = False
    tags: List[str] = Field(default_factory=list)


# =====================================================
# COUPONS
# =====================================================
class CouponCreate(ApiModel):
    code: str = Field(..., min_length=1, max_length=64)
    description: Optional[str] = None
    discount_type: Literal["percentage", "fixed"]
    discount_value: Decimal = Field(..., ge=0)
    min_purchase: Optional[Decimal] = Field(None, ge=0)
    max_discount: Optional[Decimal] = Field(None, ge=0)
    usage_limit: Optional[int] = Field(None, ge=1)
    start_date: datetime
    end_date: datetime
    is_active: bool = True


class CouponOut(ApiModel):
    id: int
    code: str
    description: Optional[str] = None
    discount_type: str
    discount_value: Decimal
    min_purchase: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    usage_count: int
    start_date: datetime
    end_date: datetime
    is_active: bool


class CouponValidateIn(ApiModel):
    code: str = Field(..., min_length=1)
    subtotal: Decimal = Field(..., ge=0)


class CouponEvaluationOut(ApiModel):
    code: str
    valid: bool
    reason: Optional[str] = None
    discount: Decimal


# =====================================================
# ORDERS
# =====================================================
class Address(ApiModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address_line1: str = Field(..., min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class OrderItemIn(ApiModel):
    product_id: int = Field(..., gt=0)
    variant_id: Optional[str] = None
    quantity: int = Field(..., ge=1)


class OrderCreate(ApiModel):
    items: List[OrderItemIn] = Field(..., min_length=1)
    shipping_address: Address
    billing_address: Optional[Address] = None
    payment_method: PaymentMethod
    coupon_code: Optional[str] = None
    notes: Optional[str] = Field(None, max_length=1000)


class OrderStatusUpdate(ApiModel):
    status: OrderStatus
    tracking_number: Optional[str] = None


class OrderItemOut(ApiModel):
    product_id: int
    product_name: Optional[str] = None
    product_slug: Optional[str] = None
    variant_id: Optional[str] = None
    quantity: int
    price: Decimal
    total: Decimal


class PaymentOut(ApiModel):
    method: str
    status: str
    provider: Optional[str] = None
    transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    amount: Decimal


class OrderOut(ApiModel):
    id: int
    order_number: str
    user_id: int
    items: List[OrderItemOut]
    shipping_address: Address
    billing_address: Address
    payment: PaymentOut
    status: str
    fulfillment_status: str
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    coupon_code: Optional[str] = None
    notes: Optional[str] = None
    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: datetime


# =====================================================
# PAYMENTS
# =====================================================
class PaymentInitiateIn(ApiModel):
    order_id: int = Field(..., gt=0)
    amount: Optional[Decimal] = Field(None, gt=0)


class RazorpayOrderOut(ApiModel):
    provider_order_id: str
    amount: int
    currency: str
    key_id: str


class RazorpayVerifyIn(ApiModel):
    provider_order_id: str = Field(..., min_length=1)
    provider_payment_id: str = Field(..., min_length=1)
    signature: str = Field(..., min_length=1)
    order_id: int = Field(..., gt=0)


class StripeIntentOut(ApiModel):
    payment_intent_id: str
    client_secret: str


class StripeConfirmIn(ApiModel):
    payment_intent_id: str = Field(..., min_length=1)
    order_id: int = Field(..., gt=0)


# =====================================================
# CONTENT
# =====================================================
BlogStatus = Literal["draft", "published", "archived"]


class BlogCategoryCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = None
    description: Optional[str] = Field(None, max_length=500)


class BlogCategoryOut(ApiModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    post_count: int


class BlogPostCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=200)
    slug: Optional[str] = None
    excerpt: Optional[str] = Field(None, max_length=500)
    content: str = Field(..., min_length=1)
    featured_image: Optional[str] = None
    category_id: int = Field(..., gt=0)
    tags: List[str] = Field(default_factory=list)
    status: BlogStatus = "draft"


class BlogPostUpdate(ApiModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    excerpt: Optional[str] = Field(None, max_length=500)
    content: Optional[str] = Field(None, min_length=1)
    featured_image: Optional[str] = None
    category_id: Optional[int] = Field(None, gt=0)
    tags: Optional[List[str]] = None
    status: Optional[BlogStatus] = None


class BlogAuthorOut(ApiModel):
    id: int
    name: str


class BlogCategoryRef(ApiModel):
    id: int
    name: str
    slug: str


class BlogPostOut(ApiModel):
    id: int
    title: str
    slug: str
    excerpt: Optional[str] = None
    content: str
    featured_image: Optional[str] = None
    author: BlogAuthorOut
    category: BlogCategoryRef
    tags: List[str]
    status: str
    published_at: Optional[datetime] = None
    views: int
    likes: int
    reading_time: int
    created_at: datetime


class TestimonialCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=254)
    avatar: Optional[str] = None
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = Field(None, max_length=200)
    content: str = Field(..., min_length=1, max_length=1000)
    is_active: bool = True
    sort_order: int = 0


class TestimonialOut(ApiModel):
    id: int
    name: str
    avatar: Optional[str] = None
    rating: int
    title: Optional[str] = None
    content: str
    is_active: bool
    sort_order: int
    created_at: datetime


class ContactCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=1, max_length=254)
    phone: Optional[str] = Field(None, max_length=32)
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)


class ContactOut(ApiModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    subject: str
    message: str
    is_read: bool
    created_at: datetime


# =====================================================
# DASHBOARD
# =====================================================
class SalesSummary(ApiModel):
    total: Decimal
    today: Decimal
    this_week: Decimal
    this_month: Decimal
    this_year: Decimal


class OrderCounts(ApiModel):
    total: int
    today: int
    pending: int
    processing: int
    completed: int
    cancelled: int


class UserCounts(ApiModel):
    total: int
    new_today: int
    new_this_week: int
    new_this_month: int


class ProductCounts(ApiModel):
    total: int
    active: int
    low_stock: int
    out_of_stock: int


class RevenuePoint(ApiModel):
    period: str
    amount: Decimal


class Revenue(ApiModel):
    daily: List[RevenuePoint]
    monthly: List[RevenuePoint]


class RecentOrder(ApiModel):
    id: int
    order_number: str
    user_id: int
    status: str
    total: Decimal
    created_at: datetime


class LowStockProduct(ApiModel):
    id: int
    name: str
    sku: str
    quantity: int


class DashboardOut(ApiModel):
    sales: SalesSummary
    orders: OrderCounts
    users: UserCounts
    products: ProductCounts
    revenue: Revenue
    recent_orders: List[RecentOrder]
    low_stock_products: List[LowStockProduct]
