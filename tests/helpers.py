from datetime import date, datetime, timedelta, timezone
from typing import Dict
from jose import jwt

from app.auth.permissions import Actor
from app.core.config import settings

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def upcoming_monday(min_days_ahead: int = 14) -> date:
    """A Monday far enough ahead that it is never in the past in any timezone"""
    base = date.today() + timedelta(days=min_days_ahead)
    return base + timedelta(days=(7 - base.weekday()) % 7)


def make_token(actor: Actor, token_type: str = "access", expires_in: timedelta = timedelta(hours=1)) -> str:
    payload = {
        "sub": str(actor.employee_id),
        "role": actor.role.value,
        "email": actor.email,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + expires_in,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def auth_headers(actor: Actor) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(actor)}"}
