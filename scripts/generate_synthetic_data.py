import random
from faker import Faker
from sqlalchemy.orm import Session

from dispatch_backend.auth import hash_password
from dispatch_backend.config import get_settings
from dispatch_backend.database import get_sessionmaker, init_db
from dispatch_backend.models import (
    AmbulancePriority,
    AmbulanceRequest,
    AmbulanceStatus,
    CustomerProfile,
    Hospital,
    HospitalStatus,
    User,
    UserRole,
)

fake = Faker("en_IN")

EMERGENCY_TYPES = [
    "Cardiac arrest",
    "Road accident",
    "Breathing difficulty",
    "Stroke",
    "Pregnancy complication",
    "Severe burn",
    "Fall injury",
]

DEMO_PASSWORD = "Demo_12345!"

STATES = ["Kerala", "Karnataka", "Tamil Nadu", "Maharashtra", "Goa"]


def _make_user(db: Session, role: UserRole) -> User:
    user = User(
        email=fake.unique.email(),
        full_name=fake.name(),
        phone=fake.phone_number(),
        role=role,
        password_hash=hash_password(DEMO_PASSWORD),
    )
    db.add(user)
    db.flush()
    return user


def generate_synthetic_dispatch(
    db: Session,
    customers: int = 30,
    staff: int = 5,
    hospitals: int = 8,
    requests_per_customer: int = 3,
) -> None:
    states = random.sample(STATES, k=3)

    for _ in range(staff):
        _make_user(db, UserRole.STAFF)

    for _ in range(hospitals):
        user = _make_user(db, UserRole.HOSPITAL)
        db.add(
            Hospital(
                user_id=user.id,
                hospital_name=f"{fake.last_name()} General Hospital",
                address=fake.address(),
                state=random.choice(states),
                district=fake.city(),
                number_of_ambulances=random.randint(1, 12),
                status=HospitalStatus.ACTIVE if random.random() < 0.9 else HospitalStatus.INACTIVE,
            )
        )

    for _ in range(customers):
        user = _make_user(db, UserRole.CUSTOMER)
        profile = CustomerProfile(
            user_id=user.id,
            address=fake.address(),
            state=random.choice(states),
            district=fake.city(),
            signup_lat=float(fake.latitude()),
            signup_lng=float(fake.longitude()),
        )
        db.add(profile)

        for _ in range(random.randint(0, requests_per_customer)):
            db.add(
                AmbulanceRequest(
                    customer_user_id=user.id,
                    pickup_address=fake.address(),
                    destination_address=fake.address(),
                    emergency_type=random.choice(EMERGENCY_TYPES),
                    customer_condition=fake.sentence(nb_words=8),
                    contact_number=user.phone,
                    priority=random.choice(list(AmbulancePriority)),
                    status=AmbulanceStatus.PENDING,
                    customer_state=profile.state,
                    customer_district=profile.district,
                )
            )

    db.commit()


if __name__ == "__main__":
    settings = get_settings()
    if settings.ENVIRONMENT != "dev" or not settings.SYNTHETIC_DATA_MODE:
        raise SystemExit("Synthetic data generation is only permitted in dev with SYNTHETIC_DATA_MODE=true")

    init_db()
    db = get_sessionmaker()()
    try:
        generate_synthetic_dispatch(db)
    finally:
        db.close()

    print("Synthetic data generation complete")
