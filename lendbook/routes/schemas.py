from pydantic import BaseModel
from typing import Optional

class BorrowRequest(BaseModel):
    item_id: str
    # Administrators may borrow on behalf of another holder
    holder_id: Optional[str] = None
