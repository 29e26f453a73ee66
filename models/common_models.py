from typing import List, Literal, Optional
from pydantic import BaseModel

DocumentRole = Literal["reference", "review"]
ChangeType = Literal["addition", "deletion", "modification"]
ReviewStatus = Literal["pending", "approved", "referred"]
EvaluationStatus = Literal["good", "warning", "critical"]

class SessionCreateResponse(BaseModel):
    session_id: str

class TemplateInfo(BaseModel):
    id: str
    name: str

class TemplatesResponse(BaseModel):
    templates: List[TemplateInfo] = []

class UploadResponse(BaseModel):
    message: str
    session_id: str
    filename: str

class EvaluationResponse(BaseModel):
    questions: List[str] = []
    answers: List[Optional[str]] = []

class Difference(BaseModel):
    index: int
    # the backend sends null for a side that has no text
    reference_text: Optional[str] = ""
    review_text: Optional[str] = ""
    ai_opinion: Optional[str] = ""

class ComparisonResponse(BaseModel):
    differences: List[Difference] = []

class ContractFields(BaseModel):
    template_type: str
    enterprise_name: str
    client_name: str
    effective_date: str
    valid_duration: str
    notice_period: str
    session_id: str

class GeneratedDocument(BaseModel):
    content: bytes
    media_type: str
    filename: str = "contract.docx"

# Client-side review records
class Change(BaseModel):
    id: str
    index: int
    type: ChangeType
    old_text: Optional[str] = None
    new_text: Optional[str] = None
    summary: str
    legal_opinion: str
    status: ReviewStatus = "pending"
    remarks: Optional[str] = None

class EvaluationItem(BaseModel):
    id: str
    question: str
    answer: str
    status: EvaluationStatus = "good"
