from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    staff_no: str
    name: str
    email: Optional[str] = None
    role: str
