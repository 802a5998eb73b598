from sqlalchemy import Column, String, ForeignKey, JSON
from .base import BaseModel, IdType


class ActivityLog(BaseModel):
    __tablename__ = "activity_logs"
    
    action = Column(String(50), nullable=False)  # login, create, update, delete, ...
    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(64))
    details = Column(JSON)
    ip_address = Column(String(64))
    user_agent = Column(String(512))
    
    user_id = Column(IdType, ForeignKey("users.id"), nullable=True, index=True)
