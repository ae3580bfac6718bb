from sqlalchemy import Column, Integer, String, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Document(Base):
    """One record of a collection, stored as a JSON body.

    Rows of a collection are ordered by ``position`` so that reading a
    collection back yields the same array that was written.
    """

    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    collection = Column(String(50), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    record_id = Column(String(64), index=True)
    body = Column(JSON, nullable=False)
