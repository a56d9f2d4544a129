import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from backoffice.exceptions import (
    InsufficientStock,
    PersistenceFailure,
    ProductNotFound,
    ValidationError,
)
from backoffice.models.product import Product
from backoffice.models.sale import Sale
from backoffice.models.stock_movement import StockMovement
from backoffice.services.ledger_store import find_balance_drift
from backoffice.services.product_service import create_product
from backoffice.services.stock_service import StockCoordinator
from db_support import fixed_clock, memory_database


class StockCoordinatorTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.Session = memory_database()
        self.clock = fixed_clock()
        self.coordinator = StockCoordinator(self.Session, clock=self.clock)
        db = self.Session()
        try:
            self.bag_id = create_product(
                db, name="Canvas Tote", category="Bags", price=100.0, stock=10, clock=self.clock
            ).id
            self.empty_id = create_product(
                db, name="Sandals", category="Footwear", price=50.0, stock=0, clock=self.clock
            ).id
            self.oud_id = create_product(
                db,
                name="Royal Oud",
                category="Oriental",
                unit="ml",
                price=4500.0,
                stock=100,
                clock=self.clock,
            ).id
        finally:
            db.close()

    def tearDown(self):
        self.engine.dispose()

    def _count(self, model):
        db = self.Session()
        try:
            return db.execute(select(func.count(model.id))).scalar_one()
        finally:
            db.close()

    def _movements(self, product_id):
        db = self.Session()
        try:
            return db.execute(
                select(StockMovement).where(StockMovement.product_id == product_id).order_by(StockMovement.id)
            ).scalars().all()
        finally:
            db.close()

    def test_sale_then_oversell(self):
        receipt = self.coordinator.record_sale(self.bag_id, 7)
        self.assertEqual(receipt.stock, 3)
        self.assertEqual(receipt.status, "Low Stock")
        self.assertEqual(receipt.total, 700.0)

        with self.assertRaises(InsufficientStock):
            self.coordinator.record_sale(self.bag_id, 5)

        level = self.coordinator.get_current_stock(self.bag_id)
        self.assertEqual(level.quantity, 3)
        self.assertEqual(level.status, "Low Stock")
        self.assertEqual(self._count(Sale), 1)
        self.assertEqual(self._count(StockMovement), 1)

    def test_sale_writes_one_sale_and_one_out_movement(self):
        receipt = self.coordinator.record_sale(self.bag_id, 2)

        movements = self._movements(self.bag_id)
        self.assertEqual(len(movements), 1)
        self.assertEqual(movements[0].movement_type, "OUT")
        self.assertEqual(movements[0].quantity, 2)
        self.assertEqual(movements[0].reason, "sale")
        self.assertEqual(movements[0].reference, "sale:{}".format(receipt.sale_id))
        self.assertEqual(self._count(Sale), 1)
        self.assertEqual(self.coordinator.get_current_stock(self.bag_id).quantity, 8)

    def test_stock_in_on_empty_product(self):
        level = self.coordinator.record_stock_in(self.empty_id, 20)

        self.assertEqual(level.quantity, 20)
        self.assertEqual(level.status, "In Stock")
        movements = self._movements(self.empty_id)
        self.assertEqual(len(movements), 1)
        self.assertEqual(movements[0].movement_type, "IN")
        self.assertEqual(movements[0].quantity, 20)
        self.assertEqual(self._count(Sale), 0)

    def test_discounted_total(self):
        receipt = self.coordinator.record_sale(self.bag_id, 2, unit_price=100.0, total=150.0)
        self.assertEqual(receipt.total, 150.0)

        with self.assertRaises(ValidationError):
            self.coordinator.record_sale(self.bag_id, 2, unit_price=100.0, total=250.0)
        self.assertEqual(self._count(Sale), 1)

    def test_sale_date_is_kept(self):
        sold_at = datetime(2024, 2, 14, 18, 0, tzinfo=timezone.utc)
        receipt = self.coordinator.record_sale(self.bag_id, 1, sale_date=sold_at)
        db = self.Session()
        try:
            sale = db.get(Sale, receipt.sale_id)
            self.assertEqual(sale.sale_date.replace(tzinfo=None), sold_at.replace(tzinfo=None))
        finally:
            db.close()

    def test_invalid_input_is_rejected_before_writes(self):
        for quantity in (0, -1, 1.5):
            with self.subTest(quantity=quantity):
                with self.assertRaises(ValidationError):
                    self.coordinator.record_sale(self.bag_id, quantity)
        with self.assertRaises(ValidationError):
            self.coordinator.record_sale(self.bag_id, 1, unit_price=0)
        with self.assertRaises(ValidationError):
            self.coordinator.record_sale(self.bag_id, 1, sale_date="not-a-date")
        self.assertEqual(self._count(Sale), 0)
        self.assertEqual(self._count(StockMovement), 0)

    def test_unknown_product(self):
        with self.assertRaises(ProductNotFound):
            self.coordinator.record_sale(999, 1)
        with self.assertRaises(ProductNotFound):
            self.coordinator.record_stock_in(999, 1)
        with self.assertRaises(ProductNotFound):
            self.coordinator.get_current_stock(999)
        self.assertEqual(self._count(StockMovement), 0)

    def test_failure_mid_transaction_rolls_everything_back(self):
        with patch(
            "backoffice.services.stock_service.apply_delta",
            side_effect=OperationalError("UPDATE products", {}, Exception("disk I/O error")),
        ):
            with self.assertRaises(PersistenceFailure):
                self.coordinator.record_sale(self.bag_id, 3)

        self.assertEqual(self._count(Sale), 0)
        self.assertEqual(self._count(StockMovement), 0)
        self.assertEqual(self.coordinator.get_current_stock(self.bag_id).quantity, 10)

    def test_stale_validation_cannot_overdraw(self):
        # Two requests that both passed the availability check: the second
        # withdrawal must still be refused by the conditional update.
        with patch("backoffice.services.stock_service._ensure_available"):
            self.coordinator.record_sale(self.bag_id, 6)
            with self.assertRaises(InsufficientStock):
                self.coordinator.record_sale(self.bag_id, 6)

        self.assertEqual(self.coordinator.get_current_stock(self.bag_id).quantity, 4)
        self.assertEqual(self._count(Sale), 1)
        self.assertEqual(self._count(StockMovement), 1)

    def test_bottle_sale(self):
        receipt = self.coordinator.record_bottle_sale(self.oud_id, "6ml", 2)
        self.assertEqual(receipt.quantity, 12)
        self.assertEqual(receipt.unit_price, 45.0)
        self.assertEqual(receipt.total, 540.0)
        self.assertEqual(receipt.stock, 88)
        self.assertEqual(receipt.status, "In Stock")

        receipt = self.coordinator.record_bottle_sale(self.oud_id, "3ml", 13)
        self.assertEqual(receipt.stock, 49)
        self.assertEqual(receipt.status, "Low Stock")

        with self.assertRaises(InsufficientStock):
            self.coordinator.record_bottle_sale(self.oud_id, "6ml", 9)

    def test_bottle_sale_rules(self):
        with self.assertRaises(ValidationError):
            self.coordinator.record_bottle_sale(self.oud_id, "10ml", 1)
        with self.assertRaises(ValidationError):
            self.coordinator.record_bottle_sale(self.bag_id, "3ml", 1)

    def test_stock_out(self):
        level = self.coordinator.record_stock_out(self.bag_id, 10)
        self.assertEqual(level.quantity, 0)
        self.assertEqual(level.status, "Out of Stock")
        with self.assertRaises(InsufficientStock):
            self.coordinator.record_stock_out(self.bag_id, 1)

    def test_adjust_stock(self):
        level = self.coordinator.adjust_stock(self.bag_id, 4)
        self.assertEqual(level.quantity, 4)
        level = self.coordinator.adjust_stock(self.bag_id, 4)
        self.assertEqual(level.quantity, 4)

        movements = self._movements(self.bag_id)
        self.assertEqual(len(movements), 1)
        self.assertEqual(movements[0].movement_type, "OUT")
        self.assertEqual(movements[0].reason, "adjustment")
        self.assertEqual(movements[0].quantity, 6)

        with self.assertRaises(ValidationError):
            self.coordinator.adjust_stock(self.bag_id, -1)

    def test_balance_matches_ledger_after_mixed_operations(self):
        self.coordinator.record_sale(self.bag_id, 3)
        self.coordinator.record_stock_in(self.bag_id, 5)
        self.coordinator.record_stock_out(self.bag_id, 2)
        self.coordinator.adjust_stock(self.bag_id, 20)
        self.coordinator.record_stock_in(self.empty_id, 7)
        self.coordinator.record_bottle_sale(self.oud_id, "3ml", 4)
        with self.assertRaises(InsufficientStock):
            self.coordinator.record_sale(self.empty_id, 8)

        db = self.Session()
        try:
            self.assertEqual(find_balance_drift(db), [])
            for product in db.execute(select(Product)).scalars():
                signed = sum(
                    m.quantity if m.movement_type == "IN" else -m.quantity
                    for m in self._movements(product.id)
                )
                self.assertEqual(product.stock, product.opening_stock + signed)
        finally:
            db.close()


if __name__ == "__main__":
    unittest.main()
