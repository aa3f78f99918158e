from types import SimpleNamespace
from uuid import uuid4

from bidsmart.schemas.project import ExtractionStatusResponse
from bidsmart.utils.responses import create_api_response


def test_list_is_wrapped_with_count():
    body = create_api_response([{"id": "a"}, {"id": "b"}])

    assert body["status"] is True
    assert body["data"] == {"items": [{"id": "a"}, {"id": "b"}], "count": 2}


def test_models_use_aliases():
    upload_id = uuid4()

    body = create_api_response(ExtractionStatusResponse(pdf_upload_id=upload_id, status="extracted", progress=100))

    assert body["data"]["pdfUploadId"] == str(upload_id)
    assert body["data"]["retryCount"] == 0


def test_none_and_scalars():
    assert create_api_response(None)["data"] == {}
    assert create_api_response(3)["data"] == {"value": 3}


def test_request_id_comes_from_correlation_id():
    request = SimpleNamespace(state=SimpleNamespace(correlation_id="corr-7"))

    body = create_api_response({}, message="ok", request=request)

    assert body["message"] == "ok"
    assert body["meta"]["request_id"] == "corr-7"
    assert body["meta"]["api_version"] == "v1"
