from datetime import date
from typing import Iterable, List, Optional, Tuple

from models.common_models import (
    Change,
    ChangeType,
    ComparisonResponse,
    Difference,
    EvaluationItem,
    EvaluationResponse,
    EvaluationStatus,
)

SUMMARY_PREFIX = "- Summary:"
LEGAL_OPINION_SEPARATOR = "\n- Legal Opinion:"
NO_LEGAL_OPINION = "No legal opinion provided"
NO_ANSWER = "No answer provided."


def classify_difference(reference_text: str, review_text: str) -> ChangeType:
    if reference_text == "":
        return "addition"
    if review_text == "":
        return "deletion"
    return "modification"


def split_ai_opinion(ai_opinion: str) -> Tuple[str, str]:
    """Split the backend's combined opinion into (summary, legal opinion)."""
    parts = ai_opinion.split(LEGAL_OPINION_SEPARATOR)
    summary = parts[0].replace(SUMMARY_PREFIX, "", 1).strip()
    legal_opinion = parts[1].strip() if len(parts) > 1 else NO_LEGAL_OPINION
    return summary, legal_opinion


def difference_to_change(diff: Difference) -> Change:
    summary, legal_opinion = split_ai_opinion(diff.ai_opinion or "")
    return Change(
        id=str(diff.index),
        index=diff.index,
        type=classify_difference(diff.reference_text or "", diff.review_text or ""),
        old_text=diff.reference_text or None,
        new_text=diff.review_text or None,
        summary=summary,
        legal_opinion=legal_opinion,
    )


def map_differences(comparison: ComparisonResponse) -> List[Change]:
    return [difference_to_change(diff) for diff in comparison.differences]


def classify_answer(answer: str) -> EvaluationStatus:
    if "NA - Not Applicable" in answer or answer.startswith("No"):
        return "good"
    if "partially" in answer or "could be" in answer:
        return "warning"
    if "issue" in answer or "excessive" in answer:
        return "critical"
    return "good"


def map_evaluation(evaluation: EvaluationResponse) -> List[EvaluationItem]:
    items = []
    for index, question in enumerate(evaluation.questions):
        answer = evaluation.answers[index] if index < len(evaluation.answers) else ""
        answer = answer or NO_ANSWER
        items.append(
            EvaluationItem(
                id=str(index),
                question=question,
                answer=answer,
                status=classify_answer(answer),
            )
        )
    return items


def _find(changes: Iterable[Change], change_id: str) -> Change:
    for change in changes:
        if change.id == change_id:
            return change
    raise KeyError(f"Change '{change_id}' not found.")


def approve_change(changes: List[Change], change_id: str) -> Change:
    change = _find(changes, change_id)
    change.status = "approved"
    return change


def refer_change(changes: List[Change], change_id: str, remarks: Optional[str] = None) -> Change:
    change = _find(changes, change_id)
    change.status = "referred"
    change.remarks = remarks
    return change


def build_comparison_report(changes: List[Change]) -> str:
    approved = [c for c in changes if c.status == "approved"]
    referred = [c for c in changes if c.status == "referred"]

    lines = [
        "DOCUMENT COMPARISON RESULTS",
        "==========================",
        "",
        f"APPROVED CHANGES ({len(approved)}):",
    ]
    lines += [f"- Change #{c.index}: {c.summary}" for c in approved]
    lines += ["", f"REFERRED CHANGES ({len(referred)}):"]
    for c in referred:
        lines.append(f"- Change #{c.index}: {c.summary}")
        lines.append(f"  Remarks: {c.remarks or 'None'}")
    return "\n".join(lines) + "\n"


def report_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"contract_comparison_{today.isoformat()}.txt"


def generated_document_filename(template_type: str, client_name: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{template_type}_{client_name}_{today.isoformat()}.docx"
