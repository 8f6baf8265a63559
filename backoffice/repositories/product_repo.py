# backoffice/repositories/product_repo.py
import uuid

from sqlmodel import Session, select

from backoffice.models.product import Product


class ProductRepository:
    """
    Read access to the product catalog.

    - Pure DB operations.
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_many(
        self,
        session: Session,
        product_ids: list[uuid.UUID],
    ) -> dict[uuid.UUID, Product]:
        """
        Load several products in one query, keyed by id.
        Unknown ids are simply absent from the result.
        """
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        return {p.id: p for p in session.exec(stmt).all()}
