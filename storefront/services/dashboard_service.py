# storefront/services/dashboard_service.py
from collections import OrderedDict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.product import ProductModel
from storefront.data.models.user import UserModel
from storefront.domain.pricing import ZERO, money
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.clock import as_utc, utcnow
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _month_start(day: datetime, months_back: int = 0) -> datetime:
    month_index = day.year * 12 + (day.month - 1) - months_back
    return day.replace(year=month_index // 12, month=month_index % 12 + 1, day=1)


class DashboardService:
    """Analityka dla panelu admina, liczona per request."""

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepo(db)
        self.products = ProductRepo(db)

    def _count(self, model, *conditions) -> int:
        return self.db.execute(select(func.count(model.id)).where(*conditions)).scalar_one()

    def summary(self, now: datetime | None = None) -> Dict[str, Any]:
        now = now or utcnow()
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week_start = today - timedelta(days=today.weekday())
        month_start = today.replace(day=1)
        year_start = today.replace(month=1, day=1)
        daily_since = today - timedelta(days=29)
        monthly_since = _month_start(today, 11)

        # jedna lista oplaconych zamowien z ostatniego roku (lub od poczatku roku)
        since = min(monthly_since, year_start)
        paid = [(as_utc(created), Decimal(total)) for created, total in self.orders.paid_since(since)]

        def sales_since(start: datetime) -> Decimal:
            return money(sum((t for c, t in paid if c >= start), ZERO))

        total_sales = self.db.execute(
            select(func.coalesce(func.sum(OrderModel.total), 0)).where(OrderModel.payment_status == "completed")
        ).scalar_one()

        daily: "OrderedDict[str, Decimal]" = OrderedDict(
            ((daily_since + timedelta(days=i)).strftime("%Y-%m-%d"), ZERO) for i in range(30)
        )
        monthly: "OrderedDict[str, Decimal]" = OrderedDict(
            (_month_start(today, 11 - i).strftime("%Y-%m"), ZERO) for i in range(12)
        )
        for created, amount in paid:
            day_key = created.strftime("%Y-%m-%d")
            if day_key in daily:
                daily[day_key] += amount
            month_key = created.strftime("%Y-%m")
            if month_key in monthly:
                monthly[month_key] += amount

        tracked_active = (ProductModel.is_active.is_(True), ProductModel.track_inventory.is_(True))
        low_stock = self.products.low_stock()

        logger.info(f"Dashboard computed: {len(paid)} paid orders since {since.date()}")

        return {
            "sales": {
                "total": money(total_sales),
                "today": sales_since(today),
                "this_week": sales_since(week_start),
                "this_month": sales_since(month_start),
                "this_year": sales_since(year_start),
            },
            "orders": {
                "total": self._count(OrderModel),
                "today": self._count(OrderModel, OrderModel.created_at >= today),
                "pending": self._count(OrderModel, OrderModel.status == "pending"),
                "processing": self._count(OrderModel, OrderModel.status == "processing"),
                "completed": self._count(OrderModel, OrderModel.status == "delivered"),
                "cancelled": self._count(OrderModel, OrderModel.status == "cancelled"),
            },
            "users": {
                "total": self._count(UserModel, UserModel.role == "user"),
                "new_today": self._count(UserModel, UserModel.created_at >= today),
                "new_this_week": self._count(UserModel, UserModel.created_at >= week_start),
                "new_this_month": self._count(UserModel, UserModel.created_at >= month_start),
            },
            "products": {
                "total": self._count(ProductModel),
                "active": self._count(ProductModel, ProductModel.is_active.is_(True)),
                "low_stock": len(low_stock),
                "out_of_stock": self._count(ProductModel, *tracked_active, ProductModel.quantity <= 0),
            },
            "revenue": {
                "daily": [{"period": k, "amount": money(v)} for k, v in daily.items()],
                "monthly": [{"period": k, "amount": money(v)} for k, v in monthly.items()],
            },
            "recent_orders": [
                {
                    "id": o.id,
                    "order_number": o.order_number,
                    "user_id": o.user_id,
                    "status": o.status,
                    "total": o.total,
                    "created_at": o.created_at,
                }
                for o in self.orders.recent(5)
            ],
            "low_stock_products": [
                {"id": p.id, "name": p.name, "sku": p.sku, "quantity": p.quantity}
                for p in low_stock[:5]
            ],
        }
