from enum import Enum
from typing import Type
from sqlalchemy import Enum as SQLEnum

def enum_column_type(enum_cls: Type[Enum]) -> SQLEnum:
    """Persist enum *values* ("Sick Leave") rather than member names ("SICK")"""
    return SQLEnum(
        enum_cls,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )
