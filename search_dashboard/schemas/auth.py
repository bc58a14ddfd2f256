from typing import Literal

from pydantic import BaseModel


class Principal(BaseModel):
    """Identity returned on successful credential verification"""

    email: str
    role: Literal["admin"] = "admin"
