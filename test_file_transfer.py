import base64
import dataclasses

import pytest
import requests

from conftest import ok
from netsuite_errors import ConfigurationError, DownloadError, UploadError
from file_transfer import decode_content, is_base64, restlet_url
from netsuite_client import NetSuiteClient

RESTLET = "https://1234567-sb1.restlets.api.netsuite.com/app/site/hosting/restlet.nl"


@pytest.fixture
def client(settings, session) -> NetSuiteClient:
    configured = dataclasses.replace(settings, access_token="T", refresh_token="R", script_id="1054", deploy_id="2")
    return NetSuiteClient(configured, session=session)


@pytest.mark.parametrize(
    "content, expected",
    [
        ("", True),
        ("aGVsbG8=", True),
        ("aGk=", True),
        ("aGVsbG8gd29ybGQh", True),
        ("hello world", False),
        ("aGVsbG8", False),
        ("a===", False),
        ("col1,col2\n1,2\n", False),
    ],
)
def test_is_base64(content, expected):
    assert is_base64(content) is expected


def test_decode_content():
    assert decode_content("aGVsbG8=") == b"hello"
    assert decode_content("plain text, not encoded") == "plain text, not encoded"


def test_restlet_url():
    assert restlet_url(RESTLET, "1054", "2") == f"{RESTLET}?script=1054&deploy=2"


def test_download_binary_file(client, session, tmp_path):
    raw = b"%PDF-1.4\x00\x01\x02binary"
    session.queue(ok({"content": base64.b64encode(raw).decode(), "info": {"name": "invoice.pdf"}}))

    path = client.download_file(524171, tmp_path)

    assert path == tmp_path.resolve() / "invoice.pdf"
    assert path.read_bytes() == raw
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == f"{RESTLET}?script=1054&deploy=2"
    assert call["json"] == {"fileId": 524171}
    assert call["headers"]["Authorization"] == "Bearer T"


def test_download_text_file_is_written_unchanged(client, session, tmp_path):
    text = "id,name\n1,ACME & Co\n"
    session.queue(ok({"content": text, "info": {"name": "customers.csv"}}))

    path = client.download_file("99", tmp_path)

    assert path.read_text(encoding="utf-8") == text


def test_download_sanitizes_file_name(client, session, tmp_path):
    session.queue(ok({"content": "report", "info": {"name": "Report (2024) Q1/Q2 *final*.pdf"}}))

    path = client.download_file("1", tmp_path)

    assert path.name == "Report (2024) Q1Q2 final.pdf"
    assert path.parent == tmp_path.resolve()


def test_download_without_name_falls_back_to_id(client, session, tmp_path):
    session.queue(ok({"content": "x y", "info": {"name": "???"}}))

    path = client.download_file("77", tmp_path)

    assert path.name == "file-77"


def test_download_requires_script_id(settings, session, tmp_path):
    client = NetSuiteClient(dataclasses.replace(settings, access_token="T"), session=session)

    with pytest.raises(ConfigurationError):
        client.download_file("1", tmp_path)
    assert session.calls == []


def test_download_http_error(client, session, tmp_path):
    session.queue(ok(text="SSS_MISSING_REQD_ARGUMENT", status_code=400))

    with pytest.raises(DownloadError) as exc_info:
        client.download_file("1", tmp_path)

    message = str(exc_info.value)
    assert RESTLET in message
    assert "Bad Request" in message
    assert "SSS_MISSING_REQD_ARGUMENT" in message
    # not retried
    assert len(session.calls) == 1


def test_download_unexpected_payload(client, session, tmp_path):
    session.queue(ok({"unexpected": True}))

    with pytest.raises(DownloadError, match="Cannot download the file 42"):
        client.download_file("42", tmp_path)


def test_download_network_failure_is_not_retried(client, session, tmp_path):
    session.queue(requests.ConnectionError("offline"))

    with pytest.raises(DownloadError, match="Cannot download the file 5"):
        client.download_file("5", tmp_path)
    assert len(session.calls) == 1


def test_upload_missing_local_file_is_skipped(client, session, tmp_path):
    assert client.upload_file(tmp_path, "Invoices", "nope.pdf") is None
    assert session.calls == []


def test_upload_puts_raw_bytes(client, session, tmp_path):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "R&D: plan.pdf").write_bytes(b"\x00\x01pdf")
    session.queue(ok({"id": "555"}))

    result = client.upload_file(tmp_path, "Invoices", "docs/R&D: plan.pdf")

    assert result == {"id": "555"}
    call = session.calls[0]
    assert call["method"] == "PUT"
    assert call["url"] == f"{RESTLET}?script=1054&deploy=2&folder=Invoices&name=RandD+plan.pdf"
    assert call["data"] == b"\x00\x01pdf"
    assert call["headers"]["Content-Type"] == "application/octet-stream"
    assert call["headers"]["Authorization"] == "Bearer T"


def test_upload_error_response_raises(client, session, tmp_path):
    (tmp_path / "a.txt").write_text("hello")
    failure = {"error": {"code": "INSUFFICIENT_PERMISSION", "message": "No access to folder"}}
    session.queue(ok(failure), ok(failure), ok(failure))

    with pytest.raises(UploadError, match="Cannot upload a new file in"):
        client.upload_file(tmp_path, "Secret", "a.txt")


def test_upload_requires_script_id(settings, session, tmp_path):
    (tmp_path / "a.txt").write_text("hello")
    client = NetSuiteClient(dataclasses.replace(settings, access_token="T"), session=session)

    with pytest.raises(ConfigurationError):
        client.upload_file(tmp_path, "Invoices", "a.txt")
