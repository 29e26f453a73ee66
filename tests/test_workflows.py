import pytest

from frontend.relay_client import RelayClient, RelayClientError
from frontend.session_manager import SESSION_ID_KEY, MemoryStorage, SessionIdentifierManager
from frontend.workflows import (
    EvaluationError,
    WorkflowError,
    compare_documents,
    in_flight,
    mark_in_flight,
    review_contract,
)
from models.common_models import ComparisonResponse, Difference, EvaluationResponse
from services.errors import SESSION_FILES_MISSING
from conftest import FakeHttp, FakeResponse

DIFF = Difference(index=0, reference_text="Old clause", review_text="New clause", ai_opinion="- Summary: text\n- Legal Opinion: text")


class FakeRelay:
    def __init__(self, compare_results, new_ids=("s2",)):
        self.compare_results = list(compare_results)
        self.new_ids = list(new_ids)
        self.calls = []

    def create_session(self):
        return self.new_ids.pop(0)

    def upload_reference(self, session_id, filename, content):
        self.calls.append(("reference", session_id, filename))

    def upload_for_review(self, session_id, filename, content, template_type):
        self.calls.append(("review", session_id, filename, template_type))

    def evaluate(self, session_id):
        self.calls.append(("evaluate", session_id))
        return EvaluationResponse(questions=["Is it fair?"], answers=["There is an issue."])

    def compare(self, session_id):
        self.calls.append(("compare", session_id))
        result = self.compare_results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def files_missing():
    return RelayClientError("Files not found for this session", 404, code=SESSION_FILES_MISSING)


def manager(relay, session_id="s1"):
    return SessionIdentifierManager(relay, MemoryStorage({SESSION_ID_KEY: session_id}))


def test_compare_uploads_in_order_then_maps_changes():
    relay = FakeRelay([ComparisonResponse(differences=[DIFF])])

    session_id, changes = compare_documents(relay, manager(relay), ("A.docx", b"a"), ("B.docx", b"b"), "msa")

    assert session_id == "s1"
    assert relay.calls == [
        ("reference", "s1", "A.docx"),
        ("review", "s1", "B.docx", "msa"),
        ("compare", "s1"),
    ]
    assert changes[0].type == "modification"
    assert changes[0].summary == "text"


def test_files_missing_retries_once_with_new_session():
    relay = FakeRelay([files_missing(), ComparisonResponse(differences=[DIFF])])
    sessions = manager(relay)

    session_id, changes = compare_documents(relay, sessions, ("A.docx", b"a"), ("B.docx", b"b"), "msa")

    assert session_id == "s2"
    assert sessions.session_id == "s2"
    assert [c for c in relay.calls if c[0] == "compare"] == [("compare", "s1"), ("compare", "s2")]
    assert ("reference", "s2", "A.docx") in relay.calls
    assert len(changes) == 1


def test_files_missing_twice_surfaces_error():
    relay = FakeRelay([files_missing(), files_missing()])

    with pytest.raises(RelayClientError) as exc:
        compare_documents(relay, manager(relay), ("A.docx", b"a"), ("B.docx", b"b"), "msa")

    assert exc.value.code == SESSION_FILES_MISSING
    assert len([c for c in relay.calls if c[0] == "compare"]) == 2


def test_other_errors_do_not_renew_session():
    relay = FakeRelay([RelayClientError("boom", 500)])
    sessions = manager(relay)

    with pytest.raises(RelayClientError):
        compare_documents(relay, sessions, ("A.docx", b"a"), ("B.docx", b"b"), "msa")

    assert sessions.session_id == "s1"


@pytest.mark.parametrize(
    "reference, review, template, message",
    [
        (None, ("B.docx", b"b"), "msa", "Please upload both documents to compare"),
        (("A.docx", b"a"), None, "msa", "Please upload both documents to compare"),
        (("A.docx", b"a"), ("B.docx", b"b"), None, "Please select a template for the compare document"),
    ],
)
def test_compare_input_checks(reference, review, template, message):
    relay = FakeRelay([])

    with pytest.raises(WorkflowError, match=message):
        compare_documents(relay, manager(relay), reference, review, template)
    assert relay.calls == []


def test_review_uploads_then_evaluates():
    relay = FakeRelay([])

    items = review_contract(relay, "s1", ("B.docx", b"b"), "nda")

    assert relay.calls == [("review", "s1", "B.docx", "nda"), ("evaluate", "s1")]
    assert items[0].status == "critical"


def test_relay_client_parses_error_body():
    http = FakeHttp()
    http.add(
        "POST",
        "http://relay.test/api/contracts/compare",
        FakeResponse(404, json_body={"error": "Files not found for this session", "code": SESSION_FILES_MISSING}),
    )
    relay = RelayClient("http://relay.test", http=http)

    with pytest.raises(RelayClientError) as exc:
        relay.compare("s1")

    assert exc.value.status_code == 404
    assert exc.value.code == SESSION_FILES_MISSING
    assert http.calls[0]["data"] == {"session_id": "s1"}


def test_relay_client_returns_generated_bytes():
    http = FakeHttp()
    http.add("POST", "http://relay.test/api/contracts/generate", FakeResponse(content=b"docx", headers={"Content-Type": "application/x"}))

    content, content_type = RelayClient("http://relay.test", http=http).generate({"session_id": "s1"})

    assert content == b"docx"
    assert content_type == "application/x"


class FailingReviewRelay(FakeRelay):
    def __init__(self, fail_on):
        super().__init__([])
        self.fail_on = fail_on

    def upload_for_review(self, session_id, filename, content, template_type):
        if self.fail_on == "upload":
            raise RelayClientError("Unsupported file type", 400)
        super().upload_for_review(session_id, filename, content, template_type)

    def evaluate(self, session_id):
        if self.fail_on == "evaluate":
            raise RelayClientError("model busy", 503)
        return super().evaluate(session_id)


def test_review_upload_failure_is_not_an_evaluation_error():
    relay = FailingReviewRelay("upload")

    with pytest.raises(RelayClientError) as exc:
        review_contract(relay, "s1", ("B.docx", b"b"), "nda")

    assert not isinstance(exc.value, EvaluationError)
    assert exc.value.message == "Unsupported file type"
    assert relay.calls == []


def test_review_evaluate_failure_is_an_evaluation_error():
    relay = FailingReviewRelay("evaluate")

    with pytest.raises(EvaluationError) as exc:
        review_contract(relay, "s1", ("B.docx", b"b"), "nda")

    assert str(exc.value) == "model busy"
    assert exc.value.cause.status_code == 503


def test_in_flight_flag_is_raised_by_callback_and_cleared_after_work():
    state = {"analyzing": False}

    mark_in_flight(state, "analyzing")
    assert state["analyzing"] is True

    with in_flight(state, "analyzing"):
        assert state["analyzing"] is True
    assert state["analyzing"] is False


def test_in_flight_flag_is_cleared_when_work_fails():
    state = {}
    mark_in_flight(state, "comparing")

    with pytest.raises(WorkflowError):
        with in_flight(state, "comparing"):
            raise WorkflowError("Please upload both documents to compare")

    assert state["comparing"] is False
