#!/usr/bin/env python
"""
    Loan Schema for Lendbook,
    a loan joined with the item it lends and the holder it is lent to.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class LoanView(BaseModel):
    loan_id: str
    item_id: str
    title: str
    author: str
    isbn: str
    holder_id: str
    holder_name: str
    borrowed_at: datetime
    returned_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "loan_id": "0b9e1c3a-6f0e-4c55-9a43-2d7c1b8f5e21",
                "item_id": "5d1c2f8e-8a4b-4f0b-b1a3-93a0e7c4d6f2",
                "title": "The Rust Programming Language",
                "author": "Steve Klabnik",
                "isbn": "9781718503106",
                "holder_id": "c7a2e1d4-1f3b-4d2e-8f6a-0a9b8c7d6e5f",
                "holder_name": "Ada",
                "borrowed_at": "2025-10-01T12:00:00Z",
                "returned_at": None
            }
        }

    @property
    def is_active(self) -> bool:
        return self.returned_at is None

    @classmethod
    def from_row(cls, loan, item, holder):
        return cls(
            loan_id=loan.id,
            item_id=item.id,
            title=item.title,
            author=item.author,
            isbn=item.isbn,
            holder_id=holder.id,
            holder_name=holder.name,
            borrowed_at=loan.borrowed_at,
            returned_at=loan.returned_at,
        )
