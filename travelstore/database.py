from sqlmodel import SQLModel, create_engine, Session
from travelstore.config import settings

connect_args = {}
if settings.database_url.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

engine = create_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,      # checks dead connections
    pool_recycle=1800,       # refresh every 30 min
    connect_args=connect_args,
)


def create_db_and_tables():
  from travelstore.models import user, package, cart, coupon, item_event, notifications
  SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
