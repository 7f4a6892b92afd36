import random
from collections.abc import Generator

from sqlalchemy.orm import Session

from timetabler.core.config import get_settings
from timetabler.db.session import SessionLocal
from timetabler.services.oracle import TimetableOracle, oracle_from_settings
from timetabler.services.time_grid import SchedulingPolicy


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_policy() -> SchedulingPolicy:
    return SchedulingPolicy.from_settings(get_settings())


def get_oracle() -> TimetableOracle | None:
    return oracle_from_settings(get_settings())


def get_rng() -> random.Random:
    return random.Random(get_settings().random_seed)
