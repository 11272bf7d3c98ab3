from typing import Any, Dict, Optional
from pydantic import BaseModel
from app.core.roles import Role


class Principal(BaseModel):
    """Authenticated caller as reported by the identity provider."""
    id: str
    email: str = ""
    role: Role = Role.USER
    metadata: Dict[str, Any] = {}
    user_id: Optional[int] = None  # local users.id when linked
