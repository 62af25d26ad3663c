# storefront/repos/cart_repo.py
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: str) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def insert_or_fetch_cart(self, user_id: str) -> CartModel:
        """
        INSERT w savepoincie; jak rownolegly request byl szybszy
        (unique na user_id) to bierzemy jego koszyk
        """
        try:
            with self.db.begin_nested():
                cart = CartModel(user_id=user_id)
                self.db.add(cart)
            return cart
        except IntegrityError:
            return self.get_cart_by_user(user_id)

    def get_cart_item(self, cart_id: str, product_id: str) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def get_owned_item(self, user_id: str, item_id: str) -> CartItemModel | None:
        # item musi nalezec do koszyka tego usera
        return self.db.execute(
            select(CartItemModel)
            .join(CartModel, CartItemModel.cart_id == CartModel.id)
            .where(CartItemModel.id == item_id, CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def get_lines_with_products(self, cart_id: str) -> list[tuple[CartItemModel, ProductModel]]:
        rows = self.db.execute(
            select(CartItemModel, ProductModel)
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.created_at, CartItemModel.id)
        ).all()
        return [(item, product) for item, product in rows]

    def insert_or_fetch_item(
        self, cart_id: str, product_id: str, quantity: int
    ) -> tuple[CartItemModel, bool]:
        """
        Jak insert_or_fetch_cart, tylko dla pozycji (unique cart_id + product_id).
        Zwraca (pozycja, czy_utworzona); przy False wywolujacy dolicza ilosc do istniejacej.
        """
        try:
            with self.db.begin_nested():
                item = CartItemModel(cart_id=cart_id, product_id=product_id, quantity=quantity)
                self.db.add(item)
            return item, True
        except IntegrityError:
            return self.get_cart_item(cart_id, product_id), False

    def delete_cart_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def delete_all_items(self, cart_id: str) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.cart_id == cart_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount
