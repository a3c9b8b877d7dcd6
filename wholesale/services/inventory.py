"""
Inventory Service
Product catalog stock and inbound registration
"""
import logging
from typing import Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from wholesale.core.exceptions import NotFoundError, ValidationError
from wholesale.models.product import Product, InventoryOption
from wholesale.models.stock import StockMovement
from wholesale.schemas.product import InboundCreate, ProductCreate
from wholesale.services.allocation import AllocationResult, AllocationService

logger = logging.getLogger("wholesale.api")


class InventoryService:
    """Products, their color/size options and incoming stock"""

    def __init__(self, db: Session):
        self.db = db
        self.allocation = AllocationService(db)

    def get_product(self, product_id: int) -> Product:
        product = (
            self.db.query(Product)
            .options(selectinload(Product.inventory_options))
            .filter(Product.id == product_id)
            .first()
        )
        if not product:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def create_product(self, product_in: ProductCreate) -> Product:
        if self.db.query(Product.id).filter(Product.code == product_in.code).first():
            raise ValidationError(f"Product code {product_in.code} already exists")

        product = Product(
            name=product_in.name,
            code=product_in.code,
            price=product_in.price,
            stock_quantity=product_in.stock_quantity,
        )
        product.inventory_options = [
            InventoryOption(
                color=option.color,
                size=option.size,
                stock_quantity=option.stock_quantity,
                physical_stock=option.physical_stock,
                allocated_stock=option.allocated_stock,
            )
            for option in product_in.inventory_options
        ]
        product.refresh_stock_quantity()

        try:
            self.db.add(product)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Product creation failed: {e}")
            raise

        self.db.refresh(product)
        logger.info(f"Product {product.code} created with {len(product.inventory_options)} options")
        return product

    def register_inbound(self, inbound: InboundCreate) -> Tuple[Product, AllocationResult]:
        """
        Add received stock and reallocate the product.

        Options tracking physical stock grow their physical quantity; legacy
        options grow their available scalar. Products without options take
        the quantity on the product-level scalar.
        """
        reason = (inbound.reason or "").strip()
        if not reason:
            raise ValidationError("Inbound reason is required")

        self.get_product(inbound.product_id)
        product = self.allocation.lock_products([inbound.product_id])[0]

        try:
            if inbound.color and inbound.size:
                option = product.find_option(inbound.color, inbound.size)
                if option is None:
                    raise NotFoundError(
                        f"No inventory option {inbound.color}/{inbound.size} on product {product.code}"
                    )
                if option.tracks_physical:
                    option.physical_stock = (option.physical_stock or 0) + inbound.quantity
                else:
                    option.stock_quantity = (option.stock_quantity or 0) + inbound.quantity
                product.refresh_stock_quantity()
            elif not product.inventory_options:
                product.stock_quantity = (product.stock_quantity or 0) + inbound.quantity
            else:
                raise ValidationError("Color and size are required for products with inventory options")

            option_label = f" ({inbound.color}/{inbound.size})" if inbound.color and inbound.size else ""
            self.db.add(StockMovement(
                product_id=product.id,
                color=inbound.color,
                size=inbound.size,
                movement_type="inbound",
                quantity=inbound.quantity,
                notes=f"Manual inbound{option_label} - {reason}",
                reference_type="inbound",
            ))
            self.db.flush()
        except (NotFoundError, ValidationError):
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Inbound registration failed for product {inbound.product_id}: {e}")
            raise

        result = self.allocation.reallocate([product.id], commit=False)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Inbound commit failed for product {inbound.product_id}: {e}")
            raise

        self.db.refresh(product)
        logger.info(f"Inbound of {inbound.quantity} registered for product {product.code}{option_label}")
        return product, result
