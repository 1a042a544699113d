from pydantic import BaseModel
from lendbook.core.models import Role

class Me(BaseModel):
    id: str
    name: str
    role: Role

    class Config:
        from_attributes = True
