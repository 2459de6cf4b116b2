from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from src.config import get_settings
from src.db.database import Base
from src.models import VehicleAd

settings = get_settings()

SELLER = {
    "user_id": "demo-seller",
    "seller_name": "Demo Seller",
    "email": "seller@example.com",
    "mobile": "0771234567",
}

ADS = [
    {"district": "Colombo", "city": "Nugegoda", "vehicle_type": "Car", "condition": "Used",
     "make": "Toyota", "model": "Axio", "year": 2016, "price": 7800000,
     "transmission": "Automatic", "fuel_type": "Hybrid", "mileage": 92000},
    {"district": "Kandy", "city": "Peradeniya", "vehicle_type": "Car", "condition": "Used",
     "make": "Honda", "model": "Vezel", "year": 2018, "price": 11500000,
     "transmission": "Automatic", "fuel_type": "Hybrid", "mileage": 61000},
    {"district": "Galle", "city": None, "vehicle_type": "Motorcycle", "condition": "New",
     "make": "Bajaj", "model": "Pulsar 150", "year": 2024, "price": 890000,
     "transmission": "Manual", "fuel_type": "Petrol", "mileage": 0},
]


def seed_ads():
    """Insert sample ads when the table is empty."""
    engine = create_engine(settings.sync_database_url)
    Base.metadata.create_all(engine)

    with Session(engine) as session:
        if session.query(VehicleAd).first() is not None:
            logger.info("Vehicle ads already present, skipping seed")
            return

        for ad_data in ADS:
            session.add(VehicleAd(**SELLER, **ad_data))
            logger.info(f"Added ad: {ad_data['make']} {ad_data['model']}")

        session.commit()

    logger.info("Seed completed")


if __name__ == "__main__":
    seed_ads()
