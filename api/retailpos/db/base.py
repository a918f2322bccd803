from sqlalchemy.orm import DeclarativeBase


# SQLAlchemy Base for ORM models
class Base(DeclarativeBase):
    pass
