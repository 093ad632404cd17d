from contextlib import nullcontext
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Iterable

from app.domain.errors import NotFoundError, InvalidArgumentError, InsufficientStockError
from app.domain.schemas import Cart, CartItem, utcnow
from app.repos.cart_repo import CartRepo
from app.services.product_client import ProductClient
from app.services.inventory_service import InventoryService
from app.services.lock_service import LockService
from app.utils.logging import get_logger

logger = get_logger(__name__)


def calculate_final_price(selling_price: Decimal, sale_percentage: Decimal | None) -> Decimal:
    """Cena po rabacie, zaokraglona do pelnej jednostki (half-up)."""
    if not sale_percentage or sale_percentage <= 0:
        return selling_price

    discount = selling_price * sale_percentage / Decimal(100)
    return (selling_price - discount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def recalculate_totals(cart: Cart) -> Cart:
    cart.total_items = sum(item.quantity for item in cart.items)
    cart.total_price = sum((item.price * item.quantity for item in cart.items), Decimal("0"))
    return cart


def _find_item(cart: Cart, product_id: str) -> CartItem:
    for item in cart.items:
        if item.product_id == product_id:
            return item
    raise NotFoundError(f"Product with ID {product_id} not found in cart")


def release_ledger(repo: CartRepo, inventory_service: InventoryService, user_id: str) -> int:
    """
    Zwalnia rezerwacje z ksiazki koszyka ktory wygasl przez TTL.
    Wolac pod lockiem koszyka. Zwraca liczbe pozycji z ksiazki.
    """
    ledger = repo.pop_ledger(user_id)
    for product_id, quantity in ledger.items():
        try:
            inventory_service.release_reservation(product_id, quantity)
        except Exception as e:
            logger.warning(
                f"Failed to release {quantity} of {product_id} "
                f"for expired cart of {user_id}: {e}"
            )
    if ledger:
        logger.info(f"Released {len(ledger)} stale reservations of expired cart of {user_id}")
    return len(ledger)


class CartService:
    """
    Koszyk w redisie zsynchronizowany z rezerwacjami w magazynie.

    Kazda komenda: odczyt calego koszyka -> jedno wywolanie magazynu ->
    zmiana -> przeliczenie sum -> zapis calego rekordu z nowym TTL
    (albo usuniecie klucza gdy koszyk jest pusty).

    Z lock_service kazdy read-modify-write idzie pod lockiem koszyka,
    bez niego dwie rownolegle komendy moga nadpisac sobie zmiany.
    """

    def __init__(
        self,
        repo: CartRepo,
        product_client: ProductClient,
        inventory_service: InventoryService,
        lock_service: LockService | None = None,
    ):
        self.repo = repo
        self.product_client = product_client
        self.inventory_service = inventory_service
        self.lock_service = lock_service

    def _cart_scope(self, user_id: str):
        if self.lock_service is None:
            return nullcontext()
        return self.lock_service.cart_lock(user_id)

    def _persist(self, cart: Cart) -> Cart:
        if cart.items:
            self.repo.save(cart)
        else:
            self.repo.delete(cart.user_id)
        return cart

    def _load_for_update(self, user_id: str) -> Cart:
        cart = self.repo.get(user_id)
        if cart is None:
            #klucz wygasl, ale ksiazka moze jeszcze trzymac stare rezerwacje,
            #zwalniamy je zanim nowy zapis ja nadpisze
            release_ledger(self.repo, self.inventory_service, user_id)
            return Cart(user_id=user_id)
        return cart

    #query
    def get_cart(self, user_id: str) -> Cart:
        cart = self.repo.get(user_id)
        if cart is None:
            #pusty koszyk nie jest zapisywany
            return Cart(user_id=user_id)
        return cart

    def get_cart_item_count(self, user_id: str) -> int:
        return self.get_cart(user_id).total_items

    @staticmethod
    def get_selected_items(cart: Cart) -> List[CartItem]:
        return [item for item in cart.items if item.selected is True]

    #commands
    def add_to_cart(self, user_id: str, product_id: str, quantity: int) -> Cart:
        if quantity <= 0:
            raise InvalidArgumentError("Quantity must be greater than 0")

        product = self.product_client.find_one(product_id)

        with self._cart_scope(user_id):
            cart = self._load_for_update(user_id)

            #rezerwujemy tylko dokladana ilosc, nie sume
            result = self.inventory_service.reserve_stock(product_id, quantity)
            if not result.success:
                raise InsufficientStockError(
                    f"Insufficient stock for product {product_id}", available=result.available
                )

            final_price = calculate_final_price(product.selling_price, product.sale_percentage)
            sale = product.sale_percentage or Decimal("0")

            existing = next((i for i in cart.items if i.product_id == product_id), None)
            if existing:
                logger.info(
                    f"Product {product_id} already in cart of {user_id}, quantity "
                    f"{existing.quantity} -> {existing.quantity + quantity}"
                )
                existing.quantity += quantity
                #cena z aktualnego katalogu przy ponownym dodaniu
                existing.price = final_price
                existing.original_price = product.selling_price
                existing.sale_percentage = sale
            else:
                logger.info(f"Adding product {product_id} x{quantity} to cart of {user_id}")
                cart.items.append(
                    CartItem(
                        product_id=product_id,
                        product_name=product.product_name,
                        price=final_price,
                        original_price=product.selling_price,
                        sale_percentage=sale,
                        quantity=quantity,
                        selected=True,
                    )
                )

            recalculate_totals(cart)
            cart.updated_at = utcnow()
            self.repo.save(cart)
            return cart

    def update_cart_item(self, user_id: str, product_id: str, quantity: int) -> Cart:
        if quantity <= 0:
            raise InvalidArgumentError("Quantity must be greater than 0")

        with self._cart_scope(user_id):
            cart = self._load_for_update(user_id)
            item = _find_item(cart, product_id)

            old_quantity = item.quantity
            diff = quantity - old_quantity

            if diff > 0:
                result = self.inventory_service.reserve_stock(product_id, diff)
                if not result.success:
                    max_quantity = old_quantity + result.available
                    raise InsufficientStockError(
                        f"Cannot increase quantity. Only {max_quantity} available in stock.",
                        available=max_quantity,
                    )
            elif diff < 0:
                self.inventory_service.release_reservation(product_id, abs(diff))

            logger.info(f"Cart of {user_id}: {product_id} quantity {old_quantity} -> {quantity}")
            item.quantity = quantity

            recalculate_totals(cart)
            cart.updated_at = utcnow()
            self.repo.save(cart)
            return cart

    def remove_from_cart(self, user_id: str, product_id: str) -> Cart:
        with self._cart_scope(user_id):
            cart = self._load_for_update(user_id)
            item = _find_item(cart, product_id)

            self.inventory_service.release_reservation(item.product_id, item.quantity)
            cart.items.remove(item)

            logger.info(f"Removed {product_id} from cart of {user_id}")
            recalculate_totals(cart)
            cart.updated_at = utcnow()
            return self._persist(cart)

    def toggle_select_item(self, user_id: str, product_id: str, selected: bool) -> Cart:
        with self._cart_scope(user_id):
            cart = self._load_for_update(user_id)
            item = _find_item(cart, product_id)

            item.selected = selected
            cart.updated_at = utcnow()
            self.repo.save(cart)
            return cart

    def toggle_select_all(self, user_id: str, selected: bool) -> Cart:
        with self._cart_scope(user_id):
            cart = self._load_for_update(user_id)

            for item in cart.items:
                item.selected = selected
            cart.updated_at = utcnow()
            return self._persist(cart)

    def remove_selected_items(self, user_id: str) -> Cart:
        # rezerwacji NIE zwalniamy, robi to potwierdzenie zamowienia (commit_reservation)
        with self._cart_scope(user_id):
            cart = self._load_for_update(user_id)

            cart.items = [item for item in cart.items if item.selected is not True]

            recalculate_totals(cart)
            cart.updated_at = utcnow()
            return self._persist(cart)

    def clear_cart(self, user_id: str) -> None:
        with self._cart_scope(user_id):
            cart = self._load_for_update(user_id)

            for item in cart.items:
                try:
                    self.inventory_service.release_reservation(item.product_id, item.quantity)
                except Exception as e:
                    logger.warning(
                        f"Failed to release {item.quantity} of {item.product_id} "
                        f"for cart of {user_id}: {e}"
                    )

            self.repo.delete(user_id)
            logger.info(f"Cleared cart of {user_id}")

    def remove_items_by_product_ids(self, user_id: str, product_ids: Iterable[str]) -> Cart:
        # jak remove_selected_items, bez zwalniania rezerwacji
        to_remove = set(product_ids)

        with self._cart_scope(user_id):
            cart = self._load_for_update(user_id)
            if not cart.items:
                raise NotFoundError("Cart is empty")

            cart.items = [item for item in cart.items if item.product_id not in to_remove]
            recalculate_totals(cart)

            if not cart.items:
                self.repo.delete(user_id)
                return Cart(user_id=user_id)

            cart.updated_at = utcnow()
            self.repo.save(cart)
            return cart
