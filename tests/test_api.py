"""HTTP tests for the documents, templates and health endpoints."""
import base64
import io
import zipfile

import pytest

from lessondocs.config import settings
from lessondocs.utils.helpers import DOCX_MIME_TYPE, rezip
from tests.conftest import SAMPLE_PLAN

W = 'xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main"'

SHORT_TEMPLATE = rezip([
    ("[Content_Types].xml", b"<Types/>"),
    ("word/document.xml", (
        f"<w:document {W}><w:body><w:tbl>"
        "<w:tr><w:tc><w:p/></w:tc><w:tc><w:p/></w:tc></w:tr>"
        "</w:tbl></w:body></w:document>"
    ).encode()),
])


def _upload(name: str, data: bytes, **form):
    return {"files": {"file": (name, data, DOCX_MIME_TYPE)}, "data": form}


# ---------------------------------------------------------------------------
# Root and health
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_root(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Lesson Docs API"
    assert "X-Process-Time" in resp.headers


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/health/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["default_template"] == "ok"
    assert body["template_storage"] in ("local", "remote")


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_generate_documents(client):
    resp = await client.post("/api/documents/generate", json=SAMPLE_PLAN)
    assert resp.status_code == 200
    body = resp.json()
    assert body["week"] == "Week 3"
    assert body["file_count"] == 5
    assert [f["type"] for f in body["files"]] == [
        "lesson_plan", "lesson_plan", "teacher_handout", "student_handout", "student_handout",
    ]
    first = body["files"][0]
    content = base64.b64decode(first["content_base64"])
    assert first["name"] == "Week03_Day1_Camera_Parts.docx"
    assert first["size_bytes"] == len(content)
    assert zipfile.is_zipfile(io.BytesIO(content))


@pytest.mark.asyncio
async def test_generate_with_unknown_template_still_succeeds(client):
    resp = await client.post(
        "/api/documents/generate", params={"template_id": "missing"}, json=SAMPLE_PLAN
    )
    assert resp.status_code == 200
    assert resp.json()["template_id"] == "missing"
    assert resp.json()["file_count"] == 5


@pytest.mark.asyncio
async def test_generate_rejects_plan_without_days(client):
    resp = await client.post("/api/documents/generate", json={"week": "1", "days": []})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_generate_archive(client):
    resp = await client.post("/api/documents/generate/archive", json=SAMPLE_PLAN)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/zip"
    assert 'filename="Week03_LessonDocuments.zip"' in resp.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(resp.content)) as zf:
        names = zf.namelist()
    assert len(names) == 5
    assert "Week3_Camera_Fundamentals_TeacherHandout.docx" in names


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_templates_starts_with_default(client):
    resp = await client.get("/api/templates/")
    assert resp.status_code == 200
    templates = resp.json()
    assert templates[0]["template_id"] == "default-cte"
    assert templates[0]["is_default"] is True
    assert len(templates) == 1


@pytest.mark.asyncio
async def test_upload_list_and_use_template(client, default_template):
    resp = await client.post("/api/templates/upload", **_upload("District_2024.docx", default_template))
    assert resp.status_code == 201
    body = resp.json()
    assert body["template_id"] == "district-2024"
    assert body["size_bytes"] == len(default_template)
    assert body["validation"]["is_valid"] is True

    listed = (await client.get("/api/templates/")).json()
    assert [t["template_id"] for t in listed] == ["default-cte", "district-2024"]

    resp = await client.post(
        "/api/documents/generate", params={"template_id": "district-2024"}, json=SAMPLE_PLAN
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_upload_reports_layout_mismatch(client):
    resp = await client.post("/api/templates/upload", **_upload("short.docx", SHORT_TEMPLATE))
    assert resp.status_code == 201
    validation = resp.json()["validation"]
    assert validation["is_valid"] is False
    assert validation["row_count"] == 1
    assert "procedures" in validation["missing_fields"]


@pytest.mark.asyncio
@pytest.mark.parametrize("name, data, form", [
    ("notes.txt", b"hello", {}),
    ("broken.docx", b"not a zip", {}),
    ("good.docx", None, {"template_id": "../escape"}),
    ("good.docx", None, {"template_id": "default-cte"}),
])
async def test_upload_rejections(client, default_template, name, data, form):
    resp = await client.post("/api/templates/upload", **_upload(name, data or default_template, **form))
    assert resp.status_code == 400
    assert "detail" in resp.json()


@pytest.mark.asyncio
async def test_upload_too_large(client, default_template, monkeypatch):
    monkeypatch.setattr(settings, "MAX_TEMPLATE_SIZE", 100)
    resp = await client.post("/api/templates/upload", **_upload("big.docx", default_template))
    assert resp.status_code == 413


@pytest.mark.asyncio
async def test_validate_templates(client, template_store):
    resp = await client.get("/api/templates/default-cte/validate")
    assert resp.status_code == 200
    assert resp.json()["is_valid"] is True
    assert resp.json()["row_count"] == 18

    resp = await client.get("/api/templates/unknown/validate")
    assert resp.status_code == 404

    await template_store.put("garbage", b"not a zip")
    resp = await client.get("/api/templates/garbage/validate")
    assert resp.status_code == 422
