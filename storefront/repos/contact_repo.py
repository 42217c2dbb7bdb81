# storefront/repos/contact_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefront.data.models.contact_message import ContactMessageModel


class ContactRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, message: ContactMessageModel) -> ContactMessageModel:
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        return message

    def list_messages(self, page: int, limit: int, is_read: bool | None = None) -> tuple[list[ContactMessageModel], int]:
        query = select(ContactMessageModel)
        count = select(func.count(ContactMessageModel.id))
        if is_read is not None:
            query = query.where(ContactMessageModel.is_read.is_(is_read))
            count = count.where(ContactMessageModel.is_read.is_(is_read))

        query = query.order_by(ContactMessageModel.created_at.desc(), ContactMessageModel.id.desc())
        query = query.offset((page - 1) * limit).limit(limit)

        items = list(self.db.execute(query).scalars().all())
        total = self.db.execute(count).scalar_one()
        return items, total
