"""
WellNest Backend — Upload Endpoint Tests
=========================================

What:  Multipart handling, the admin-only guard and error statuses of /api/upload.
How:   The upload singleton is pointed at a temporary directory per test.
"""

import os
from pathlib import Path
from tempfile import SpooledTemporaryFile

import pytest

from app.models.enums import Role
from app.services.upload_service import upload_service


@pytest.fixture
def storage(temp_storage, monkeypatch):
    monkeypatch.setattr(upload_service, "upload_dir", Path(temp_storage))
    monkeypatch.setattr(upload_service, "max_bytes", 1024 * 1024)
    return temp_storage


@pytest.fixture
def admin(make_principal, as_principal):
    return as_principal(make_principal(role=Role.ADMIN))


@pytest.fixture
def rollovers(monkeypatch):
    """Records every spooled upload part that spills over to a file on disk."""
    rolled = []
    original = SpooledTemporaryFile.rollover

    def tracking_rollover(self):
        rolled.append(self)
        original(self)

    monkeypatch.setattr(SpooledTemporaryFile, "rollover", tracking_rollover)
    return rolled


class TestUpload:

    @pytest.mark.asyncio
    async def test_event_image_uploaded(self, test_client, storage, admin, sample_image_bytes, libmagic):
        response = await test_client.post(
            "/api/upload/event-image",
            files={"image": ("retreat.jpg", sample_image_bytes, "image/jpeg")},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["originalName"] == "retreat.jpg"
        assert data["filePath"] == f"/uploads/{data['filename']}"
        assert os.path.exists(os.path.join(storage, data["filename"]))

    @pytest.mark.asyncio
    async def test_pdf_rejected_without_write(self, test_client, storage, admin):
        response = await test_client.post(
            "/api/upload/practitioner-image",
            files={"image": ("cv.pdf", b"%PDF-1.7", "application/pdf")},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Only image files are allowed (jpeg, jpg, png, gif, webp)"
        assert os.listdir(storage) == []

    @pytest.mark.asyncio
    async def test_too_large(self, test_client, storage, admin):
        response = await test_client.post(
            "/api/upload/event-image",
            files={"image": ("huge.png", b"x" * (1024 * 1024 + 1), "image/png")},
        )
        assert response.status_code == 413
        assert response.json()["error"] == "payload_too_large"
        assert os.listdir(storage) == []

    @pytest.mark.asyncio
    async def test_wrong_field_name(self, test_client, storage, admin, sample_image_bytes):
        response = await test_client.post(
            "/api/upload/event-image",
            files={"photo": ("a.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Unexpected field name for file upload."

    @pytest.mark.asyncio
    async def test_two_files(self, test_client, storage, admin, sample_image_bytes):
        response = await test_client.post(
            "/api/upload/event-image",
            files=[
                ("image", ("a.jpg", sample_image_bytes, "image/jpeg")),
                ("image", ("b.jpg", sample_image_bytes, "image/jpeg")),
            ],
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Too many files. Only one file is allowed."

    @pytest.mark.asyncio
    async def test_no_file(self, test_client, storage, admin):
        response = await test_client.post("/api/upload/event-image", data={"caption": "hello"})
        assert response.status_code == 400
        assert response.json()["message"] == "No image file uploaded"

    @pytest.mark.asyncio
    async def test_staff_cannot_upload(self, test_client, storage, make_principal, as_principal, sample_image_bytes):
        as_principal(make_principal(role=Role.STAFF))
        response = await test_client.post(
            "/api/upload/event-image",
            files={"image": ("a.jpg", sample_image_bytes, "image/jpeg")},
        )
        assert response.status_code == 403
        assert response.json()["message"] == "User role staff is not authorized to access this route"


class TestBodyLimits:

    @pytest.mark.asyncio
    async def test_large_pdf_rejected_without_touching_disk(
        self, test_client, storage, admin, rollovers, monkeypatch
    ):
        monkeypatch.setattr(upload_service, "max_bytes", 5 * 1024 * 1024)

        response = await test_client.post(
            "/api/upload/event-image",
            files={"image": ("brochure.pdf", b"%PDF-1.7" + b"0" * (3 * 1024 * 1024), "application/pdf")},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Only image files are allowed (jpeg, jpg, png, gif, webp)"
        assert rollovers == []
        assert os.listdir(storage) == []

    @pytest.mark.asyncio
    async def test_declared_length_over_limit_is_413_before_parsing(
        self, test_client, storage, admin, rollovers
    ):
        response = await test_client.post(
            "/api/upload/event-image",
            files={"image": ("brochure.pdf", b"0" * (3 * 1024 * 1024), "application/pdf")},
        )

        assert response.status_code == 413
        assert response.json()["message"] == "File too large. Maximum size allowed is 1MB."
        assert rollovers == []

    @pytest.mark.asyncio
    async def test_streamed_body_cut_off_at_limit(self, test_client, storage, admin, rollovers):
        boundary = "wellnest-boundary"
        head = (
            f"--{boundary}\r\n"
            'Content-Disposition: form-data; name="image"; filename="big.png"\r\n'
            "Content-Type: image/png\r\n\r\n"
        ).encode()
        tail = f"\r\n--{boundary}--\r\n".encode()

        async def body():
            yield head
            for _ in range(40):
                yield b"0" * (64 * 1024)
            yield tail

        response = await test_client.post(
            "/api/upload/event-image",
            content=body(),
            headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
        )

        assert response.status_code == 413
        assert rollovers == []
        assert os.listdir(storage) == []


class TestInfoAndDelete:

    @pytest.mark.asyncio
    async def test_info_then_delete(self, test_client, storage, admin, sample_image_bytes, libmagic):
        uploaded = await test_client.post(
            "/api/upload/event-image",
            files={"image": ("a.png", sample_image_bytes, "image/png")},
        )
        filename = uploaded.json()["data"]["filename"]

        info = await test_client.get(f"/api/upload/{filename}")
        assert info.status_code == 200
        assert info.json()["data"]["size"] == len(sample_image_bytes)

        deleted = await test_client.delete(f"/api/upload/{filename}")
        assert deleted.status_code == 200
        assert not os.path.exists(os.path.join(storage, filename))

    @pytest.mark.asyncio
    async def test_dotted_filename_rejected(self, test_client, storage, admin):
        response = await test_client.get("/api/upload/..secret.jpg")
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid filename"

    @pytest.mark.asyncio
    async def test_missing_file(self, test_client, storage, admin):
        response = await test_client.delete("/api/upload/image-0-000000000000.jpg")
        assert response.status_code == 404
