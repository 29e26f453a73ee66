from sqlalchemy import Column, String
from database import Base

class UploadRecordDB(Base):
    __tablename__ = "upload_records"

    session_id = Column(String, primary_key=True, index=True)
    reference_file = Column(String, nullable=True)
    review_file = Column(String, nullable=True)
