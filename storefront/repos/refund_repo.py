# storefront/repos/refund_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.refund import RefundModel
from storefront.data.models.refund_request import RefundRequestModel

OPEN_STATUSES = ("pending", "approved", "refunded")


class RefundRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_request(self, request_id: int) -> RefundRequestModel | None:
        return self.db.get(RefundRequestModel, request_id)

    def list_requests(self) -> list[RefundRequestModel]:
        query = select(RefundRequestModel).order_by(
            RefundRequestModel.created_at.desc(), RefundRequestModel.id.desc()
        )
        return list(self.db.execute(query).scalars())

    def list_user_requests(self, user_id: int) -> list[RefundRequestModel]:
        query = (
            select(RefundRequestModel)
            .where(RefundRequestModel.user_id == user_id)
            .order_by(RefundRequestModel.created_at.desc(), RefundRequestModel.id.desc())
        )
        return list(self.db.execute(query).scalars())

    def find_open_request(self, order_id: int, user_id: int) -> RefundRequestModel | None:
        return self.db.execute(
            select(RefundRequestModel).where(
                RefundRequestModel.order_id == order_id,
                RefundRequestModel.user_id == user_id,
                RefundRequestModel.status.in_(OPEN_STATUSES),
            )
        ).scalars().first()

    def create_request(self, request: RefundRequestModel) -> RefundRequestModel:
        self.db.add(request)
        self.db.commit()
        self.db.refresh(request)
        return request

    def decide_pending(self, request_id: int, new_data: dict) -> int:
        """
        UPDATE refund_requests SET ... WHERE id = :id AND status = 'pending'
        rowcount 0 -> wniosek nie jest juz oczekujacy
        """
        result = self.db.execute(
            update(RefundRequestModel)
            .where(RefundRequestModel.id == request_id, RefundRequestModel.status == "pending")
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def add_refund(self, refund: RefundModel) -> RefundModel:
        self.db.add(refund)
        self.db.flush()
        return refund

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
