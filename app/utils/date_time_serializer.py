from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict

from sqlalchemy import inspect


def serialize_dates(data: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively convert date/datetime/time and enum values to JSON-friendly values"""
    def convert_value(value: Any) -> Any:
        if isinstance(value, (datetime, date, time)):
            return value.isoformat()
        elif isinstance(value, Enum):
            return value.value
        elif isinstance(value, dict):
            return serialize_dates(value)
        elif isinstance(value, (list, tuple)):
            return [convert_value(item) for item in value]
        return value
    
    serialized = {}
    for key, value in data.items():
        serialized[key] = convert_value(value)
    return serialized


def model_snapshot(instance: Any) -> Dict[str, Any]:
    """Column values of an ORM instance, serialized for a JSON column"""
    mapper = inspect(instance).mapper
    return serialize_dates({
        attr.key: getattr(instance, attr.key)
        for attr in mapper.column_attrs
    })
