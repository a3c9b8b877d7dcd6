"""
Allocation Service
Runs the collect -> restore -> reallocate -> persist pass inside one transaction
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from wholesale.core.exceptions import AllocationError
from wholesale.models.product import Product
from .allocator import allocate_fifo
from .collector import collect_affected_orders
from .restorer import restore_allocations
from .status import AllocationState, collapse_order_status, derive_allocation_state
from .working_set import ItemGrant, OrderDemand, StockBook, StockKey

logger = logging.getLogger("wholesale.allocation")


@dataclass
class OrderAllocation:
    order_id: int
    order_number: str
    state: AllocationState
    status: str


@dataclass
class AllocationResult:
    """Summary of one allocation pass"""
    product_ids: List[int] = field(default_factory=list)
    orders: List[OrderAllocation] = field(default_factory=list)
    grants: List[ItemGrant] = field(default_factory=list)
    remaining_stock: Dict[StockKey, int] = field(default_factory=dict)
    restored_quantity: int = 0

    def _count(self, state: AllocationState) -> int:
        return sum(1 for order in self.orders if order.state is state)

    @property
    def fully_allocated(self) -> int:
        return self._count(AllocationState.FULLY_ALLOCATED)

    @property
    def partially_allocated(self) -> int:
        return self._count(AllocationState.PARTIALLY_ALLOCATED)

    @property
    def pending(self) -> int:
        return self._count(AllocationState.PENDING)

    def for_order(self, order_id: int) -> List[ItemGrant]:
        return [grant for grant in self.grants if grant.order_id == order_id]


class AllocationService:
    """
    Time-ordered inventory allocation for purchase orders

    Every pass locks the affected product rows, recomputes allocation for
    all open orders touching them from a restored baseline, and writes the
    result back before a single commit. Any failure rolls the whole pass back.
    """

    def __init__(self, db: Session):
        self.db = db

    def reallocate(self, product_ids: Iterable[int], commit: bool = True,
                   rebuild: bool = False) -> AllocationResult:
        """
        Recompute allocation for every open order demanding these products.

        Args:
            product_ids: products whose demand or stock changed
            commit: commit when done; callers running a larger unit pass False
            rebuild: start physically tracked options from physical stock
                instead of restoring recorded allocations

        Raises:
            AllocationError: the pass failed and the transaction was rolled back
        """
        ids = sorted({pid for pid in product_ids if pid is not None})
        if not ids:
            return AllocationResult()

        logger.info(f"Allocation pass started for products {ids}")

        try:
            self.db.flush()
            products = self.lock_products(ids)
            orders = collect_affected_orders(self.db, ids)

            book = StockBook.from_products(products, ids, rebuild=rebuild)
            demands = [OrderDemand.from_order(order) for order in orders]

            restored = restore_allocations(demands, book)
            grants = allocate_fifo(demands, book)
            summaries = self._persist(orders, demands, products, book)

            if commit:
                self.db.commit()

        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Allocation pass failed for products {ids}: {e}")
            raise AllocationError(f"Allocation pass failed: {e}", ids) from e

        result = AllocationResult(
            product_ids=ids,
            orders=summaries,
            grants=grants,
            remaining_stock=book.remaining(),
            restored_quantity=restored,
        )
        logger.info(
            f"Allocation pass completed: {len(orders)} orders, "
            f"full={result.fully_allocated}, partial={result.partially_allocated}, "
            f"pending={result.pending}, restored={restored}"
        )
        return result

    def reset_and_reallocate(self, commit: bool = True) -> AllocationResult:
        """
        Rebuild allocation for the whole catalog.

        Physically tracked options restart from their physical stock, which
        also clears any allocated_stock drift left by removed orders.
        """
        product_ids = [row.id for row in self.db.query(Product.id).all()]
        logger.info(f"Full reset and reallocation over {len(product_ids)} products")
        return self.reallocate(product_ids, commit=commit, rebuild=True)

    def release_items(self, items: Iterable) -> int:
        """
        Return the stock held by items leaving the allocation pool.

        Used before an order is cancelled or its lines replaced, since the
        collector no longer sees those items. Does not commit.
        """
        items = [item for item in items if (item.allocated_quantity or 0) > 0]
        if not items:
            return 0

        products = self.lock_products({item.product_id for item in items})
        optionless = {product.id: product for product in products if not product.inventory_options}
        options = {
            (option.product_id, option.color, option.size): option
            for product in products
            for option in product.inventory_options
        }

        released = 0
        for item in items:
            quantity = item.allocated_quantity
            option = options.get((item.product_id, item.color, item.size))
            if option is not None:
                if option.tracks_physical:
                    option.allocated_stock = max(0, (option.allocated_stock or 0) - quantity)
                else:
                    option.stock_quantity = (option.stock_quantity or 0) + quantity
                released += quantity
            elif item.product_id in optionless:
                product = optionless[item.product_id]
                product.stock_quantity = (product.stock_quantity or 0) + quantity
                released += quantity
            item.allocated_quantity = 0

        for product in products:
            product.refresh_stock_quantity()

        self.db.flush()
        logger.info(f"Released {released} allocated units from {len(items)} items")
        return released

    def lock_products(self, product_ids: Iterable[int]) -> List[Product]:
        """SELECT ... FOR UPDATE in id order so overlapping passes serialize"""
        return (
            self.db.query(Product)
            .options(selectinload(Product.inventory_options))
            .filter(Product.id.in_(sorted({pid for pid in product_ids if pid is not None})))
            .order_by(Product.id)
            .with_for_update()
            .all()
        )

    def _persist(self, orders, demands: List[OrderDemand], products: List[Product],
                 book: StockBook) -> List[OrderAllocation]:
        summaries = []
        orders_by_id = {order.id: order for order in orders}

        for demand in demands:
            order = orders_by_id[demand.order_id]
            rows = {item.id: item for item in order.items}
            for item in demand.items:
                rows[item.item_id].allocated_quantity = item.allocated_quantity

            state = derive_allocation_state(demand.items)
            order.allocation_status = state.value
            order.status = collapse_order_status(state)
            summaries.append(OrderAllocation(
                order_id=order.id,
                order_number=order.order_number,
                state=state,
                status=order.status,
            ))

        for product in products:
            product_level = book.product_level(product.id)
            if product_level is not None:
                product.stock_quantity = product_level.available
            for option in product.inventory_options:
                level = book.get((option.product_id, option.color, option.size))
                if level is None:
                    continue
                if level.tracks_physical:
                    option.physical_stock = level.physical_stock
                    option.allocated_stock = level.physical_stock - level.available
                else:
                    option.stock_quantity = level.available
            product.refresh_stock_quantity()

        self.db.flush()
        return summaries
