import os
from datetime import datetime
import pytest
from cryptography.fernet import Fernet

# Ensure critical env vars are set before backend imports
os.environ.setdefault("FIELD_ENCRYPTION_KEY", Fernet.generate_key().decode("utf-8"))
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("AUTH_MODE", "dev_stub")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("AMBULANCE_LISTING_SCHEMA", "auto")


@pytest.fixture
def db_session(tmp_path, monkeypatch):
    db_path = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")

    from dispatch_backend.config import get_settings
    from dispatch_backend.database import reset_engine, get_engine, get_sessionmaker
    from dispatch_backend.models import Base
    from dispatch_backend.services.encryption import reset_fernet

    get_settings.cache_clear()
    reset_fernet()
    reset_engine()
    engine = get_engine()
    Base.metadata.create_all(bind=engine)

    SessionLocal = get_sessionmaker()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        reset_engine()


@pytest.fixture
def make_user(db_session):
    from dispatch_backend.auth import hash_password
    from dispatch_backend.models import CustomerProfile, Hospital, User, UserRole

    counter = {"n": 0}

    def _make(role, *, state=None, district=None, hospital_name=None, hospital_status=None, **fields):
        counter["n"] += 1
        role = UserRole(role)
        user = User(
            email=fields.pop("email", f"{role.value}{counter['n']}@example.com"),
            full_name=fields.pop("full_name", f"{role.value.title()} {counter['n']}"),
            phone=fields.pop("phone", None),
            role=role,
            password_hash=hash_password(fields.pop("password", "Secret_123!")),
            **fields,
        )
        db_session.add(user)
        db_session.flush()
        if role == UserRole.CUSTOMER:
            db_session.add(
                CustomerProfile(
                    user_id=user.id,
                    address=f"{counter['n']} Signup Road",
                    state=state,
                    district=district,
                )
            )
        if role == UserRole.HOSPITAL:
            hospital = Hospital(
                user_id=user.id,
                hospital_name=hospital_name or f"Hospital {counter['n']}",
                address=f"{counter['n']} Ward Street",
                state=state or "Kerala",
                district=district,
                number_of_ambulances=3,
            )
            if hospital_status is not None:
                hospital.status = hospital_status
            db_session.add(hospital)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def actor_for():
    from dispatch_backend.auth import Actor

    return Actor.from_user


@pytest.fixture
def make_request(db_session):
    from dispatch_backend.models import AmbulancePriority, AmbulanceRequest, AmbulanceStatus

    def _make(customer, *, priority=AmbulancePriority.NORMAL, status=AmbulanceStatus.PENDING, created_at=None, **fields):
        request = AmbulanceRequest(
            customer_user_id=customer.id,
            pickup_address=fields.pop("pickup_address", "12 MG Road"),
            destination_address=fields.pop("destination_address", "City Hospital"),
            emergency_type=fields.pop("emergency_type", "Fall injury"),
            contact_number=fields.pop("contact_number", "9000000000"),
            priority=priority,
            status=status,
            created_at=created_at or datetime(2026, 1, 1, 12, 0, 0),
            **fields,
        )
        db_session.add(request)
        db_session.commit()
        return request

    return _make


@pytest.fixture
def service(db_session):
    from dispatch_backend.services.ambulance_service import AmbulanceService

    return AmbulanceService(db_session)
