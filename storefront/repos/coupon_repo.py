# storefront/repos/coupon_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel


def normalize_code(code: str) -> str:
    return code.strip().upper()


class CouponRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str) -> CouponModel | None:
        return self.db.execute(
            select(CouponModel).where(CouponModel.code == normalize_code(code))
        ).scalar_one_or_none()

    def create(self, coupon: CouponModel) -> CouponModel:
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def increment_usage(self, coupon_id: int, expected_count: int) -> int:
        """CAS +1 na usage_count, bez commita. 0 rows = konflikt."""
        result = self.db.execute(
            update(CouponModel)
            .where(
                CouponModel.id == coupon_id,
                CouponModel.usage_count == expected_count,
            )
            .values(usage_count=expected_count + 1)
        )
        return result.rowcount
