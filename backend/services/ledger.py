import enum
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, insert, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from db import session_scope
from errors import (
    InvalidDiscount,
    InvalidProduct,
    ProductAlreadyExists,
    ProductNotFound,
    StorageFault,
)
from schema import Product, ProductDiscount
from services.pricing import compute_final_price
from services.vat import canonical_country, get_vat_rate, normalize_country

logger = logging.getLogger(__name__)

MAX_ID_LENGTH = 50
MAX_NAME_LENGTH = 200

# Dialects with a native INSERT ... ON CONFLICT DO NOTHING
CONFLICT_AWARE_INSERTS = {
    "sqlite": sqlite_insert,
    "postgresql": postgresql_insert,
}

UNIQUE_VIOLATION_SQLSTATE = "23505"
SQLITE_UNIQUE_ERRORS = {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY"}
MYSQL_DUPLICATE_ENTRY = 1062


class ApplyOutcome(enum.Enum):
    APPLIED = "applied"
    ALREADY_APPLIED = "already_applied"

    @property
    def message(self) -> str:
        if self is ApplyOutcome.APPLIED:
            return "Discount applied successfully"
        return "Discount already applied"


@dataclass(frozen=True)
class Discount:
    discount_id: str
    percent: float

    def to_dict(self):
        return {"discountId": self.discount_id, "percent": self.percent}


@dataclass(frozen=True)
class PricedProduct:
    """
    A product as surfaced to callers: stored fields, applied discounts in
    insertion order and the final price computed from them.
    """
    id: str
    name: str
    base_price: float
    country: str
    discounts: Tuple[Discount, ...]
    final_price: float

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "basePrice": self.base_price,
            "country": self.country,
            "discounts": [d.to_dict() for d in self.discounts],
            "finalPrice": round(self.final_price, 2),
        }


def is_unique_violation(exc: IntegrityError) -> bool:
    """
    Classifies an IntegrityError by the driver's structured error code.

    Recognizes PostgreSQL SQLSTATE 23505 (psycopg2 and psycopg 3), the SQLite
    extended result codes for UNIQUE and PRIMARY KEY violations and MySQL
    error 1062. Any other integrity failure (foreign key, NOT NULL, CHECK)
    returns False.
    """
    orig = getattr(exc, "orig", None) or exc
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    if getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION_SQLSTATE:
        return True
    if getattr(orig, "sqlite_errorname", None) in SQLITE_UNIQUE_ERRORS:
        return True
    args = getattr(orig, "args", ())
    return bool(args) and args[0] == MYSQL_DUPLICATE_ENTRY


def _is_number(value) -> bool:
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float, Decimal)):
        return False
    return math.isfinite(float(value))


def validate_discount(discount_id, percent) -> Tuple[str, float]:
    """
    Checks a discount request before any storage access.

    Args:
        discount_id: Caller-supplied idempotency key.
        percent: Discount percentage; must satisfy 0 < percent <= 100.

    Returns:
        The trimmed discount id and the percent as a float.

    Raises:
        InvalidDiscount: The id is empty or too long, or the percent is not a
            number in range.
    """
    if not isinstance(discount_id, str) or not discount_id.strip():
        raise InvalidDiscount("discountId must be a non-empty string")
    discount_id = discount_id.strip()
    if len(discount_id) > MAX_ID_LENGTH:
        raise InvalidDiscount(
            f"discountId must be at most {MAX_ID_LENGTH} characters", discount_id[:MAX_ID_LENGTH]
        )
    if not _is_number(percent):
        raise InvalidDiscount("percent must be a number", discount_id)
    percent = float(percent)
    if not 0 < percent <= 100:
        raise InvalidDiscount("percent must be greater than 0 and at most 100", discount_id)
    return discount_id, percent


class DiscountLedger:
    """
    Authoritative record of which discounts are applied to which product.

    The ledger owns no connection state of its own: every operation opens a
    short-lived session from the injected factory, so several service
    instances can share one database. Exactly-once application rests on the
    (product_id, discount_id) unique constraint, never on in-process locks.
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    # --- reads ---

    def find_product(self, product_id: str) -> Optional[PricedProduct]:
        with session_scope(self.session_factory) as db:
            try:
                product = db.get(Product, product_id)
                if product is None:
                    return None
                return self._price(product, self._discounts_for(db, [product.id])[product.id])
            except SQLAlchemyError as e:
                logger.error(f"Failed to read product {product_id}: {e}")
                raise StorageFault("reading product") from e

    def list_products_by_country(self, country: str) -> List[PricedProduct]:
        """
        Args:
            country: Country name in any letter casing.

        Returns:
            Products sold in the country, ordered by product id.

        Raises:
            UnsupportedCountry: The country has no VAT rate.
        """
        canonical_country(country)
        query = (
            select(Product)
            .where(func.lower(func.trim(Product.country)) == normalize_country(country))
            .order_by(Product.id)
        )
        return self._list(query)

    def list_products(self) -> List[PricedProduct]:
        return self._list(select(Product).order_by(Product.id))

    # --- writes ---

    def apply_discount(self, product_id: str, discount_id: str, percent) -> Tuple[ApplyOutcome, PricedProduct]:
        """
        Applies a discount to a product at most once.

        Re-submitting the same (product_id, discount_id) is a successful no-op
        reported as ALREADY_APPLIED; the first stored percent is kept.

        Args:
            product_id: Identifier of an existing product.
            discount_id: Idempotency key, unique per product.
            percent: Discount percentage, 0 < percent <= 100.

        Returns:
            The outcome and the product's current state including the discount.

        Raises:
            InvalidDiscount: Validation failed; storage was not touched.
            ProductNotFound: No product with this id.
            StorageFault: The database failed for any other reason.
        """
        discount_id, percent = validate_discount(discount_id, percent)

        with session_scope(self.session_factory) as db:
            try:
                if db.get(Product, product_id) is None:
                    raise ProductNotFound(product_id)
                inserted = self._insert_discount(db, product_id, discount_id, percent)
                db.commit()
            except SQLAlchemyError as e:
                logger.error(f"Failed to apply discount {discount_id} to product {product_id}: {e}")
                raise StorageFault("applying discount") from e

            outcome = ApplyOutcome.APPLIED if inserted else ApplyOutcome.ALREADY_APPLIED
            if inserted:
                logger.info(f"Discount {discount_id} ({percent}%) applied to product {product_id}")
            else:
                logger.info(f"Discount {discount_id} already applied to product {product_id}")

            try:
                product = db.get(Product, product_id)
                priced = self._price(product, self._discounts_for(db, [product_id])[product_id])
            except SQLAlchemyError as e:
                logger.error(f"Failed to reload product {product_id}: {e}")
                raise StorageFault("reading product") from e
            return outcome, priced

    def create_product(self, product_id: str, name: str, base_price, country: str,
                       discounts: Iterable[Tuple[str, float]] = ()) -> PricedProduct:
        """
        Stores a new product, optionally with discounts already applied.

        Args:
            product_id: Unique identifier, at most 50 characters.
            name: Display name.
            base_price: Non-negative price before discounts and VAT.
            country: Supported country; stored under its display name.
            discounts: (discount_id, percent) pairs to store with the product.

        Returns:
            The created product with its computed final price.

        Raises:
            InvalidProduct, InvalidDiscount, UnsupportedCountry: Bad input.
            ProductAlreadyExists: The id is taken.
            StorageFault: Any other database failure.
        """
        product_id, name, base_price = self._validate_product(product_id, name, base_price)
        country = canonical_country(country)

        seen = set()
        checked = []
        for discount_id, percent in discounts:
            discount_id, percent = validate_discount(discount_id, percent)
            if discount_id in seen:
                raise InvalidDiscount("duplicate discountId in request", discount_id)
            seen.add(discount_id)
            checked.append((discount_id, percent))

        with session_scope(self.session_factory) as db:
            try:
                if db.get(Product, product_id) is not None:
                    raise ProductAlreadyExists(product_id)
                product = Product(id=product_id, name=name, base_price=base_price, country=country)
                db.add(product)
                db.flush()
                now = datetime.now(timezone.utc)
                for discount_id, percent in checked:
                    db.add(ProductDiscount(
                        product_id=product_id,
                        discount_id=discount_id,
                        percent=percent,
                        applied_at=now,
                    ))
                db.commit()
            except IntegrityError as e:
                if is_unique_violation(e):
                    raise ProductAlreadyExists(product_id) from e
                logger.error(f"Failed to create product {product_id}: {e}")
                raise StorageFault("creating product") from e
            except SQLAlchemyError as e:
                logger.error(f"Failed to create product {product_id}: {e}")
                raise StorageFault("creating product") from e

            logger.info(f"Created product {product_id} ({country}, {base_price})")
            return self._price(product, self._discounts_for(db, [product_id])[product_id])

    # --- internals ---

    def _insert_discount(self, db, product_id, discount_id, percent) -> bool:
        """
        Inserts the discount unless (product_id, discount_id) already exists.

        Returns:
            True when a row was written, False on a uniqueness conflict.
        """
        values = {
            "product_id": product_id,
            "discount_id": discount_id,
            "percent": percent,
            "applied_at": datetime.now(timezone.utc),
        }
        table = ProductDiscount.__table__
        dialect_insert = CONFLICT_AWARE_INSERTS.get(db.get_bind().dialect.name)

        if dialect_insert is not None:
            stmt = dialect_insert(table).values(**values).on_conflict_do_nothing(
                index_elements=["product_id", "discount_id"]
            )
            return db.execute(stmt).rowcount == 1

        try:
            with db.begin_nested():
                db.execute(insert(table).values(**values))
        except IntegrityError as e:
            if is_unique_violation(e):
                return False
            raise
        return True

    def _list(self, query) -> List[PricedProduct]:
        with session_scope(self.session_factory) as db:
            try:
                products = db.execute(query).scalars().all()
                discounts = self._discounts_for(db, [p.id for p in products])
                return [self._price(p, discounts[p.id]) for p in products]
            except SQLAlchemyError as e:
                logger.error(f"Failed to list products: {e}")
                raise StorageFault("listing products") from e

    @staticmethod
    def _discounts_for(db, product_ids) -> Dict[str, List[ProductDiscount]]:
        grouped = {pid: [] for pid in product_ids}
        if not product_ids:
            return grouped
        rows = db.execute(
            select(ProductDiscount)
            .where(ProductDiscount.product_id.in_(product_ids))
            .order_by(ProductDiscount.id)
        ).scalars().all()
        for row in rows:
            grouped[row.product_id].append(row)
        return grouped

    @staticmethod
    def _price(product: Product, discount_rows) -> PricedProduct:
        fields = product.to_dict()
        discounts = tuple(Discount(d.discount_id, float(d.percent)) for d in discount_rows)
        base_price = float(fields["base_price"])
        final_price = compute_final_price(
            base_price,
            get_vat_rate(fields["country"]),
            [d.percent for d in discounts],
        )
        return PricedProduct(
            id=fields["id"],
            name=fields["name"],
            base_price=base_price,
            country=fields["country"],
            discounts=discounts,
            final_price=final_price,
        )

    @staticmethod
    def _validate_product(product_id, name, base_price):
        if not isinstance(product_id, str) or not product_id.strip():
            raise InvalidProduct("id must be a non-empty string")
        product_id = product_id.strip()
        if len(product_id) > MAX_ID_LENGTH:
            raise InvalidProduct(f"id must be at most {MAX_ID_LENGTH} characters")
        if not isinstance(name, str) or not name.strip():
            raise InvalidProduct("name must be a non-empty string")
        name = name.strip()
        if len(name) > MAX_NAME_LENGTH:
            raise InvalidProduct(f"name must be at most {MAX_NAME_LENGTH} characters")
        if not _is_number(base_price):
            raise InvalidProduct("basePrice must be a number")
        base_price = round(float(base_price), 2)
        if base_price < 0:
            raise InvalidProduct("basePrice must not be negative")
        return product_id, name, base_price
