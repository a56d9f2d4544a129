import unittest
from datetime import date, datetime, timezone

from backoffice.exceptions import SaleNotFound, ValidationError
from backoffice.services.product_service import create_product
from backoffice.services.report_service import (
    accounting_summary,
    daily_sales,
    list_movements,
    monthly_sales_totals,
    total_stock_worth,
)
from backoffice.services.sales_service import delete_sale, list_sales, sales_summary
from backoffice.services.stock_service import StockCoordinator
from db_support import fixed_clock, memory_database

SALES = [
    (datetime(2024, 1, 5, 9, 0, tzinfo=timezone.utc), 1, 100.0),
    (datetime(2024, 1, 20, 17, 45, tzinfo=timezone.utc), 2, 180.0),
    (datetime(2024, 3, 2, 12, 0, tzinfo=timezone.utc), 1, 100.0),
    (datetime(2024, 3, 2, 15, 30, tzinfo=timezone.utc), 3, 300.0),
    (datetime(2023, 12, 31, 23, 0, tzinfo=timezone.utc), 1, 100.0),
]


def _seed(session_factory, clock, sales):
    db = session_factory()
    try:
        product_id = create_product(
            db, name="Tote", category="Bags", price=100.0, stock=100, clock=clock
        ).id
        create_product(
            db, name="Oud", category="Oriental", price=4000.0, stock=50, unit="ml", clock=clock
        )
    finally:
        db.close()
    coordinator = StockCoordinator(session_factory, clock=clock)
    for sold_at, quantity, total in sales:
        coordinator.record_sale(product_id, quantity, unit_price=100.0, total=total, sale_date=sold_at)
    return coordinator, product_id


class ReportServiceTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.Session = memory_database()
        self.clock = fixed_clock()
        self.coordinator, self.product_id = _seed(self.Session, self.clock, SALES)
        self.db = self.Session()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_monthly_totals(self):
        totals = monthly_sales_totals(self.db, 2024)
        self.assertEqual(
            totals,
            [
                {"month": 1, "month_name": "January", "total": 280.0},
                {"month": 3, "month_name": "March", "total": 400.0},
            ],
        )
        self.assertEqual(monthly_sales_totals(self.db, 2023)[0]["month_name"], "December")
        self.assertEqual(monthly_sales_totals(self.db, 2022), [])

    def test_monthly_totals_match_sale_rows_for_any_insert_order(self):
        engine, session_factory = memory_database()
        try:
            _seed(session_factory, fixed_clock(), list(reversed(SALES)))
            db = session_factory()
            try:
                reversed_totals = monthly_sales_totals(db, 2024)
            finally:
                db.close()
        finally:
            engine.dispose()

        self.assertEqual(reversed_totals, monthly_sales_totals(self.db, 2024))
        for entry in reversed_totals:
            expected = sum(
                total for sold_at, _, total in SALES
                if sold_at.year == 2024 and sold_at.month == entry["month"]
            )
            self.assertAlmostEqual(entry["total"], expected)

    def test_invalid_period(self):
        with self.assertRaises(ValidationError):
            monthly_sales_totals(self.db, 0)
        with self.assertRaises(ValidationError):
            daily_sales(self.db, 2024, 13)

    def test_daily_calendar(self):
        days = daily_sales(self.db, 2024, 3)
        self.assertEqual(len(days), 31)
        self.assertEqual(days[1]["date"], date(2024, 3, 2))
        self.assertEqual(days[1]["total"], 400.0)
        self.assertEqual(days[1]["transactions"], 2)
        self.assertEqual(days[0]["transactions"], 0)
        self.assertEqual(len(daily_sales(self.db, 2024, 2)), 29)

    def test_stock_worth(self):
        # Tote: 92 left at 100 each; Oud: 50 ml at 4000 per 100 ml.
        self.assertEqual(total_stock_worth(self.db), 92 * 100.0 + 2000.0)

    def test_accounting_summary(self):
        self.coordinator.record_stock_in(self.product_id, 10)
        summary = accounting_summary(self.db, 2024, 1)
        self.assertEqual(summary["revenue"], 280.0)
        self.assertEqual(summary["sale_count"], 2)
        self.assertEqual(summary["quantity_sold"], 3)
        self.assertEqual(summary["movements_out"], 2)
        self.assertEqual(summary["quantity_withdrawn"], 3)
        self.assertEqual(summary["movements_in"], 0)

        march = accounting_summary(self.db, 2024, 3)
        self.assertEqual(march["quantity_received"], 10)
        self.assertEqual(march["movements_in"], 1)

    def test_movement_history(self):
        self.coordinator.record_stock_in(self.product_id, 10)
        history = list_movements(self.db, year=2024, month=1)
        self.assertEqual(len(history), 2)
        self.assertTrue(all(item["movement_type"] == "OUT" for item in history))
        self.assertEqual(history[0]["product_name"], "Tote")

        manual = list_movements(self.db, exclude_sales=True)
        self.assertEqual(len(manual), 1)
        self.assertEqual(manual[0]["reason"], "stock_in")

        with self.assertRaises(ValidationError):
            list_movements(self.db, month=1)

    def test_sales_listing_and_summary(self):
        sales = list_sales(self.db)
        self.assertEqual(len(sales), 5)
        self.assertEqual(sales[0]["product_name"], "Tote")
        self.assertEqual(sales[0]["total"], 300.0)

        summary = sales_summary(self.db, today=date(2024, 3, 2))
        self.assertEqual(summary["total_sales"], 780.0)
        self.assertEqual(summary["today_sales"], 400.0)
        self.assertEqual(summary["sale_count"], 5)
        self.assertEqual(summary["average_order_value"], 156.0)

    def test_delete_sale_keeps_stock_and_ledger(self):
        sale_id = list_sales(self.db)[0]["id"]
        before = self.coordinator.get_current_stock(self.product_id).quantity

        delete_sale(self.db, sale_id)

        self.assertEqual(len(list_sales(self.db)), 4)
        self.assertEqual(self.coordinator.get_current_stock(self.product_id).quantity, before)
        self.assertEqual(len(list_movements(self.db, product_id=self.product_id)), 5)
        with self.assertRaises(SaleNotFound):
            delete_sale(self.db, sale_id)


if __name__ == "__main__":
    unittest.main()
