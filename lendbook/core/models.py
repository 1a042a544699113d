#!/usr/bin/env python

"""
    Models for Lendbook,
    including the users, items and loans tables.

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

import enum
import uuid
from sqlalchemy import (
    Column, String, Text, DateTime, ForeignKey, Index, text,
    Enum as SQLAlchemyEnum
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from lendbook.core.db import Base


def new_id():
    return str(uuid.uuid4())


class Role(enum.Enum):
    ADMIN = 'admin'
    USER = 'user'


class User(Base):
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(SQLAlchemyEnum(Role), default=Role.USER, nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())


class Item(Base):
    __tablename__ = 'items'

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    isbn = Column(String(32), nullable=False)
    description = Column(Text, default='', nullable=False)
    owner_id = Column(String(36), ForeignKey('users.id'), nullable=False)
    created_at = Column(DateTime(timezone=True), default=func.now())

    owner = relationship('User')


class Loan(Base):
    __tablename__ = 'loans'

    id = Column(String(36), primary_key=True, default=new_id)
    item_id = Column(String(36), ForeignKey('items.id'), nullable=False)
    holder_id = Column(String(36), ForeignKey('users.id'), nullable=False)
    borrowed_at = Column(DateTime(timezone=True), nullable=False)
    returned_at = Column(DateTime(timezone=True), nullable=True)

    item = relationship('Item', back_populates='loans')
    holder = relationship('User')

    __table_args__ = (
        # At most one unreturned loan per item
        Index(
            'uq_loans_active_item', 'item_id', unique=True,
            postgresql_where=text("returned_at IS NULL"),
            sqlite_where=text("returned_at IS NULL"),
        ),
        Index('ix_loans_holder_active', 'holder_id', 'returned_at'),
    )


Item.loans = relationship(
    'Loan', back_populates='item', order_by=Loan.borrowed_at)
