"""
Allocation working set

Plain value objects copied out of the ORM rows at the start of an
allocation pass. The restorer and allocator only ever mutate these;
the service writes the final values back in one flush.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

StockKey = Tuple[int, str, str]


@dataclass
class StockLevel:
    """Available stock for one (product, color, size)"""
    option_id: Optional[int]
    product_id: int
    color: str
    size: str
    available: int
    tracks_physical: bool = False
    physical_stock: int = 0
    # Baseline was rebuilt from physical stock, prior allocations are not added back
    rebuilt: bool = False
    # Product without options: one level serves every color and size
    product_level: bool = False

    @property
    def key(self) -> StockKey:
        return (self.product_id, self.color, self.size)


class StockBook:
    """
    Stock levels for the products covered by one allocation pass

    Products with inventory options have one level per (color, size).
    Products without options have a single product-level level that
    answers for any color and size.
    """

    def __init__(self, levels: Iterable[StockLevel], product_ids: Iterable[int]):
        self._levels: Dict[StockKey, StockLevel] = {}
        self._product_levels: Dict[int, StockLevel] = {}
        for level in levels:
            if level.product_level:
                self._product_levels[level.product_id] = level
            else:
                self._levels[level.key] = level
        self.product_ids = frozenset(product_ids)

    @classmethod
    def from_products(cls, products, product_ids: Iterable[int], rebuild: bool = False) -> "StockBook":
        """
        Build a book from locked Product rows and their options.

        With rebuild=True, options that track physical stock start from
        their full physical quantity instead of physical minus allocated.
        """
        levels = []
        for product in products:
            if product.inventory_options:
                levels.extend(cls._option_level(option, rebuild) for option in product.inventory_options)
            else:
                levels.append(StockLevel(
                    option_id=None,
                    product_id=product.id,
                    color="",
                    size="",
                    available=product.stock_quantity or 0,
                    product_level=True,
                ))
        return cls(levels, product_ids)

    @staticmethod
    def _option_level(option, rebuild: bool) -> StockLevel:
        tracks_physical = option.tracks_physical
        physical = option.physical_stock or 0
        if tracks_physical and rebuild:
            available = physical
        else:
            available = option.available_stock
        return StockLevel(
            option_id=option.id,
            product_id=option.product_id,
            color=option.color,
            size=option.size,
            available=available,
            tracks_physical=tracks_physical,
            physical_stock=physical,
            rebuilt=tracks_physical and rebuild,
        )

    def covers(self, product_id: Optional[int]) -> bool:
        return product_id in self.product_ids

    def get(self, key: StockKey) -> Optional[StockLevel]:
        level = self._levels.get(key)
        if level is None:
            level = self._product_levels.get(key[0])
        return level

    def product_level(self, product_id: int) -> Optional[StockLevel]:
        return self._product_levels.get(product_id)

    def __iter__(self):
        yield from self._levels.values()
        yield from self._product_levels.values()

    def __len__(self):
        return len(self._levels) + len(self._product_levels)

    def remaining(self) -> Dict[StockKey, int]:
        return {level.key: level.available for level in self}


@dataclass
class ItemDemand:
    item_id: int
    order_id: int
    product_id: Optional[int]
    color: str
    size: str
    quantity: int
    shipped_quantity: int = 0
    allocated_quantity: int = 0

    @property
    def key(self) -> StockKey:
        return (self.product_id, self.color, self.size)

    @property
    def outstanding(self) -> int:
        return max(0, self.quantity - self.shipped_quantity)


@dataclass
class OrderDemand:
    order_id: int
    order_number: str
    created_at: datetime
    items: List[ItemDemand] = field(default_factory=list)

    @classmethod
    def from_order(cls, order) -> "OrderDemand":
        """Snapshot an Order row, keeping only positive-quantity lines"""
        return cls(
            order_id=order.id,
            order_number=order.order_number,
            created_at=order.created_at,
            items=[
                ItemDemand(
                    item_id=item.id,
                    order_id=order.id,
                    product_id=item.product_id,
                    color=item.color,
                    size=item.size,
                    quantity=item.quantity,
                    shipped_quantity=item.shipped_quantity or 0,
                    allocated_quantity=item.allocated_quantity or 0,
                )
                for item in order.items
                if item.quantity > 0
            ],
        )


@dataclass
class ItemGrant:
    """Outcome of allocating one line item"""
    order_id: int
    item_id: int
    product_id: int
    color: str
    size: str
    requested: int
    granted: int

    @property
    def shortfall(self) -> int:
        return self.requested - self.granted
