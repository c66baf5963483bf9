"""In-memory cart of seat selections and concessions.

Nothing here touches the store; the cart only becomes durable at checkout.
"""

from dataclasses import asdict, dataclass, field
from typing import List


@dataclass
class CartLineItem:
    show_time_id: int
    show_id: int
    show_title: str
    show_date: str
    start_time: str
    seats: List[dict]
    price_per_seat: float

    @property
    def subtotal(self):
        return len(self.seats) * self.price_per_seat


@dataclass
class CartProductLine:
    product_id: int
    name: str
    price: float
    quantity: int

    @property
    def subtotal(self):
        return self.price * self.quantity


@dataclass
class Cart:
    items: List[CartLineItem] = field(default_factory=list)
    products: List[CartProductLine] = field(default_factory=list)

    def add_showtime_selection(self, item: CartLineItem):
        # A later selection for the same showtime replaces the earlier one
        for index, existing in enumerate(self.items):
            if existing.show_time_id == item.show_time_id:
                self.items[index] = item
                return
        self.items.append(item)

    def remove_showtime_selection(self, show_time_id: int):
        self.items = [i for i in self.items if i.show_time_id != show_time_id]

    def add_product(self, line: CartProductLine):
        for existing in self.products:
            if existing.product_id == line.product_id:
                existing.quantity += line.quantity
                return
        self.products.append(line)

    def set_product_quantity(self, product_id: int, quantity: int):
        if quantity <= 0:
            self.remove_product(product_id)
            return
        for existing in self.products:
            if existing.product_id == product_id:
                existing.quantity = quantity

    def remove_product(self, product_id: int):
        self.products = [p for p in self.products if p.product_id != product_id]

    def clear(self):
        self.items = []
        self.products = []

    def total_price(self) -> float:
        tickets = sum(item.subtotal for item in self.items)
        concessions = sum(product.subtotal for product in self.products)
        return round(tickets + concessions, 2)

    def item_count(self) -> int:
        return sum(len(item.seats) for item in self.items) + sum(p.quantity for p in self.products)

    def is_empty(self) -> bool:
        return not self.items and not self.products

    def to_dict(self):
        return {
            "items": [asdict(item) for item in self.items],
            "products": [asdict(product) for product in self.products],
        }

    @classmethod
    def from_dict(cls, data):
        if not data:
            return cls()
        return cls(
            items=[CartLineItem(**item) for item in data.get("items", [])],
            products=[CartProductLine(**product) for product in data.get("products", [])],
        )
