# app/db/base_class.py
from typing import Any

from sqlalchemy.orm import as_declarative, declared_attr


@as_declarative()
class Base:
    id: Any
    __name__: str

    # table name defaults to the lower-cased class name
    @declared_attr
    def __tablename__(cls) -> str:
        return cls.__name__.lower()
