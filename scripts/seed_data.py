import argparse
from datetime import timedelta

from sqlalchemy import delete, select

from backoffice.core.clock import SystemClock
from backoffice.core.constants import UNIT_ML
from backoffice.core.logging import setup_logging
from backoffice.database import Base, SessionLocal, engine
from backoffice.models import Product, Sale, StockMovement, import_all_models
from backoffice.services.product_service import create_product
from backoffice.services.stock_service import StockCoordinator


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample back-office data.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)

    clock = SystemClock()
    db = SessionLocal()
    try:
        if args.reset:
            db.execute(delete(Sale))
            db.execute(delete(StockMovement))
            db.execute(delete(Product))
            db.commit()

        has_product = db.execute(select(Product.id).limit(1)).first()
        if has_product:
            print("Seed skipped: products already exist.")
            return

        shoes = create_product(
            db,
            name="Leather Sandals",
            category="Footwear",
            price=1800.0,
            stock=12,
            supplier="Nairobi Leather Co.",
            clock=clock,
        )
        bag = create_product(
            db,
            name="Canvas Tote",
            category="Bags",
            price=950.0,
            stock=4,
            clock=clock,
        )
        oud = create_product(
            db,
            name="Royal Oud",
            category="Oriental",
            brand="Maison Amani",
            unit=UNIT_ML,
            price=4500.0,
            stock=100,
            supplier="Scent Imports",
            clock=clock,
        )
        product_ids = (shoes.id, bag.id, oud.id)
    finally:
        db.close()

    coordinator = StockCoordinator(SessionLocal, clock=clock)
    now = clock.now()
    coordinator.record_sale(product_ids[0], 2, sale_date=now - timedelta(days=3))
    coordinator.record_sale(product_ids[0], 1, total=1500.0, sale_date=now - timedelta(days=1))
    coordinator.record_stock_in(product_ids[1], 10)
    coordinator.record_bottle_sale(product_ids[2], "6ml", 2, sale_date=now)
    print("Seed data created.")


if __name__ == "__main__":
    main()
