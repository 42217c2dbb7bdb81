#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.user import UserModel
from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel, ProductTagModel
from storefront.data.models.coupon import CouponModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.blog import BlogCategoryModel, BlogPostModel, BlogPostTagModel
from storefront.data.models.testimonial import TestimonialModel
from storefront.data.models.contact_message import ContactMessageModel

__all__ = [
    "UserModel",
    "CategoryModel",
    "ProductModel",
    "ProductTagModel",
    "CouponModel",
    "OrderModel",
    "OrderItemModel",
    "BlogCategoryModel",
    "BlogPostModel",
    "BlogPostTagModel",
    "TestimonialModel",
    "ContactMessageModel",
]
