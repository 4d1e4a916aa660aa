from sqlalchemy import Column, String, Text
from config import Base

class KeyValue(Base):
    __tablename__ = "kv_store"

    key = Column(String(64), primary_key=True, index=True)
    value = Column(Text, nullable=False)
