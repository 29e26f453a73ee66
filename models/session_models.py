from typing import Optional
from pydantic import BaseModel

class UploadRecord(BaseModel):
    """Filenames last uploaded under a session, kept for display only."""
    session_id: str
    reference_file: Optional[str] = None
    review_file: Optional[str] = None
