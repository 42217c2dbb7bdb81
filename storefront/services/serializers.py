# storefront/services/serializers.py
"""Model -> dict conversion; derived fields (stock status, discount %) are computed here."""
import math
from typing import Any, Dict

from storefront.data.models.blog import BlogCategoryModel, BlogPostModel
from storefront.data.models.category import CategoryModel
from storefront.data.models.contact_message import ContactMessageModel
from storefront.data.models.coupon import CouponModel
from storefront.data.models.order import OrderModel
from storefront.data.models.product import ProductModel
from storefront.data.models.testimonial import TestimonialModel
from storefront.data.models.user import UserModel
from storefront.domain.inventory import stock_status, discount_percentage


def user_to_dict(user: UserModel) -> Dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "created_at": user.created_at,
    }


def category_to_dict(category: CategoryModel) -> Dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "image": category.image,
        "parent_id": category.parent_id,
        "is_active": category.is_active,
        "sort_order": category.sort_order,
    }


def product_to_dict(p: ProductModel) -> Dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "slug": p.slug,
        "description": p.description,
        "short_description": p.short_description,
        "price": p.price,
        "compare_price": p.compare_price,
        "discount_percentage": discount_percentage(p.price, p.compare_price),
        "category_id": p.category_id,
        "sku": p.sku,
        "tags": p.tags,
        "inventory": {
            "quantity": p.quantity,
            "low_stock_threshold": p.low_stock_threshold,
            "track_inventory": p.track_inventory,
            "allow_backorders": p.allow_backorders,
        },
        "stock_status": stock_status(
            p.quantity, p.low_stock_threshold, p.track_inventory, p.allow_backorders
        ),
        "rating_average": p.rating_average,
        "rating_count": p.rating_count,
        "is_active": p.is_active,
        "is_featured": p.is_featured,
        "created_at": p.created_at,
    }


def coupon_to_dict(c: CouponModel) -> Dict[str, Any]:
    return {
        "id": c.id,
        "code": c.code,
        "description": c.description,
        "discount_type": c.discount_type,
        "discount_value": c.discount_value,
        "min_purchase": c.min_purchase,
        "max_discount": c.max_discount,
        "usage_limit": c.usage_limit,
        "usage_count": c.usage_count,
        "start_date": c.start_date,
        "end_date": c.end_date,
        "is_active": c.is_active,
    }


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "user_id": order.user_id,
        "items": [
            {
                "product_id": i.product_id,
                "product_name": i.product.name if i.product else None,
                "product_slug": i.product.slug if i.product else None,
                "variant_id": i.variant_id,
                "quantity": i.quantity,
                "price": i.price,
                "total": i.total,
            }
            for i in order.items
        ],
        "shipping_address": order.shipping_address,
        "billing_address": order.billing_address,
        "payment": {
            "method": order.payment_method,
            "status": order.payment_status,
            "provider": order.payment_provider,
            "transaction_id": order.payment_transaction_id,
            "paid_at": order.payment_paid_at,
            "amount": order.payment_amount,
        },
        "status": order.status,
        "fulfillment_status": order.fulfillment_status,
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "tax": order.tax,
        "discount": order.discount,
        "total": order.total,
        "coupon_code": order.coupon_code,
        "notes": order.notes,
        "tracking_number": order.tracking_number,
        "shipped_at": order.shipped_at,
        "delivered_at": order.delivered_at,
        "created_at": order.created_at,
    }


WORDS_PER_MINUTE = 200


def reading_time(content: str) -> int:
    """Minutes, rounded up, never below one."""
    return max(1, math.ceil(len(content.split()) / WORDS_PER_MINUTE))


def blog_category_to_dict(c: BlogCategoryModel) -> Dict[str, Any]:
    return {
        "id": c.id,
        "name": c.name,
        "slug": c.slug,
        "description": c.description,
        "post_count": c.post_count,
    }


def blog_post_to_dict(post: BlogPostModel) -> Dict[str, Any]:
    return {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "excerpt": post.excerpt,
        "content": post.content,
        "featured_image": post.featured_image,
        "author": {"id": post.author.id, "name": post.author.name},
        "category": {"id": post.category.id, "name": post.category.name, "slug": post.category.slug},
        "tags": post.tags,
        "status": post.status,
        "published_at": post.published_at,
        "views": post.views,
        "likes": post.likes,
        "reading_time": reading_time(post.content),
        "created_at": post.created_at,
    }


def testimonial_to_dict(t: TestimonialModel) -> Dict[str, Any]:
    # email zostaje w bazie, nie wychodzi publicznie
    return {
        "id": t.id,
        "name": t.name,
        "avatar": t.avatar,
        "rating": t.rating,
        "title": t.title,
        "content": t.content,
        "is_active": t.is_active,
        "sort_order": t.sort_order,
        "created_at": t.created_at,
    }


def contact_to_dict(m: ContactMessageModel) -> Dict[str, Any]:
    return {
        "id": m.id,
        "name": m.name,
        "email": m.email,
        "phone": m.phone,
        "subject": m.subject,
        "message": m.message,
        "is_read": m.is_read,
        "created_at": m.created_at,
    }
