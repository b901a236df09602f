import uuid

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all ORM models."""


def generate_uuid() -> str:
    return str(uuid.uuid4())
