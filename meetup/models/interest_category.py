from sqlalchemy import Column, String

from .base import BaseModel


class InterestCategory(BaseModel):
    __tablename__ = "interest_categories"

    name = Column(String(50), unique=True, nullable=False)
    icon = Column(String(50), nullable=True)
