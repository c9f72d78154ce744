# fulfillment/repos/charges_repo.py
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from fulfillment.data.models.charges import ChargesModel


class ChargesRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_for_user(self, user_id: int) -> Optional[ChargesModel]:
        return self.db.execute(
            select(ChargesModel).where(ChargesModel.user_id == user_id)
        ).scalar_one_or_none()

    def get(self, charges_id: int, user_id: int) -> Optional[ChargesModel]:
        return self.db.execute(
            select(ChargesModel).where(
                ChargesModel.id == charges_id,
                ChargesModel.user_id == user_id,
            )
        ).scalar_one_or_none()

    def save(self, charges: ChargesModel) -> ChargesModel:
        self.db.add(charges)
        self.db.flush()
        return charges

    def delete_for_user(self, user_id: int) -> int:
        result = self.db.execute(
            delete(ChargesModel).where(ChargesModel.user_id == user_id)
        )
        return result.rowcount

    def delete(self, charges_id: int, user_id: int) -> int:
        result = self.db.execute(
            delete(ChargesModel).where(
                ChargesModel.id == charges_id,
                ChargesModel.user_id == user_id,
            )
        )
        return result.rowcount
