"""
Integration tests for PDF API endpoints
"""

import json

import fitz

from core.pdf import count_pages


def _pdf_file(data: bytes, name: str = "report.pdf"):
    return ("file", (name, data, "application/pdf"))


class TestPdfAPI:
    """Integration tests for PDF tool endpoints"""

    def test_page_count(self, client, pdf_factory):
        """Test counting pages without a session"""
        response = client.post("/api/pdf/page-count", files=[_pdf_file(pdf_factory(4))])

        assert response.status_code == 200
        data = response.json()
        assert data["page_count"] == 4
        assert data["filename"] == "report.pdf"

    def test_page_count_rejects_image(self, client, png_bytes):
        """Test non-PDF uploads are rejected"""
        response = client.post(
            "/api/pdf/page-count", files={"file": ("photo.png", png_bytes, "image/png")}
        )

        assert response.status_code == 415

    def test_merge(self, client, open_session, pdf_factory):
        """Test merging two documents and downloading the result"""
        session_id = open_session("pdf-merger")

        response = client.post(
            f"/api/pdf/{session_id}/merge",
            files=[
                ("files", ("a.pdf", pdf_factory(2), "application/pdf")),
                ("files", ("b.pdf", pdf_factory(3), "application/pdf")),
            ],
        )

        assert response.status_code == 200
        data = response.json()
        assert data["operation"] == "merge"
        assert data["page_count"] == 5

        download = client.get(f"/api/blob/{data['files'][0]['handle']}")
        assert download.headers["content-type"] == "application/pdf"
        assert count_pages(download.content) == 5

    def test_split_ranges(self, client, open_session, pdf_factory):
        """Test splitting by ranges"""
        session_id = open_session("pdf-splitter")

        response = client.post(
            f"/api/pdf/{session_id}/split",
            files=[_pdf_file(pdf_factory(6))],
            data={"mode": "ranges", "ranges": "1-2, 4-6"},
        )

        assert response.status_code == 200
        files = response.json()["files"]
        assert [f["filename"] for f in files] == ["report_pages_1-2.pdf", "report_pages_4-6.pdf"]

    def test_split_pages(self, client, open_session, pdf_factory):
        """Test splitting into single pages"""
        session_id = open_session("pdf-splitter")

        response = client.post(
            f"/api/pdf/{session_id}/split", files=[_pdf_file(pdf_factory(3))]
        )

        assert response.status_code == 200
        assert len(response.json()["files"]) == 3

    def test_split_invalid_ranges(self, client, open_session, pdf_factory):
        """Test ranges outside the document give 400"""
        session_id = open_session("pdf-splitter")

        response = client.post(
            f"/api/pdf/{session_id}/split",
            files=[_pdf_file(pdf_factory(2))],
            data={"mode": "ranges", "ranges": "5-9"},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Invalid value"

    def test_images_to_pdf(self, client, open_session, png_bytes, jpeg_bytes):
        """Test building a document from two images"""
        session_id = open_session("image-to-pdf")

        response = client.post(
            f"/api/pdf/{session_id}/images-to-pdf",
            files=[
                ("files", ("a.png", png_bytes, "image/png")),
                ("files", ("b.jpg", jpeg_bytes, "image/jpeg")),
            ],
            data={"page_size": "letter", "orientation": "landscape", "title": "Album"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["page_count"] == 2
        assert data["files"][0]["filename"] == "Album.pdf"

    def test_images_to_pdf_large_margin(self, client, open_session, png_bytes):
        """Test an oversized margin is clamped to the page instead of rejected"""
        session_id = open_session("image-to-pdf")

        response = client.post(
            f"/api/pdf/{session_id}/images-to-pdf",
            files=[("files", ("a.png", png_bytes, "image/png"))],
            data={"margin": "500"},
        )

        assert response.status_code == 200
        assert response.json()["page_count"] == 1

    def test_to_images(self, client, open_session, pdf_factory):
        """Test rendering pages to PNG"""
        session_id = open_session("pdf-to-image")

        response = client.post(
            f"/api/pdf/{session_id}/to-images",
            files=[_pdf_file(pdf_factory(2))],
            data={"format": "png", "quality": "low"},
        )

        assert response.status_code == 200
        files = response.json()["files"]
        assert [f["mime_type"] for f in files] == ["image/png", "image/png"]

    def test_to_images_invalid_format(self, client, open_session, pdf_factory):
        """Test unsupported render formats give 400"""
        session_id = open_session("pdf-to-image")

        response = client.post(
            f"/api/pdf/{session_id}/to-images",
            files=[_pdf_file(pdf_factory(1))],
            data={"format": "tiff"},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Validation failed"

    def test_compress(self, client, open_session, pdf_factory):
        """Test compression reports sizes"""
        session_id = open_session("pdf-compressor")
        data = pdf_factory(3)

        response = client.post(
            f"/api/pdf/{session_id}/compress",
            files=[_pdf_file(data)],
            data={"level": "maximum"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["original_size"] == len(data)
        assert body["compressed_size"] == body["files"][0]["size"]
        assert body["compression_ratio"] >= 0

    def test_unknown_session(self, client, pdf_factory):
        """Test PDF operations on missing sessions"""
        response = client.post("/api/pdf/missing/compress", files=[_pdf_file(pdf_factory(1))])

        assert response.status_code == 404

    def test_text_to_pdf(self, client, open_session):
        """Test generating a document from text and downloading it"""
        session_id = open_session("pdf-generator")

        response = client.post(
            f"/api/pdf/{session_id}/text-to-pdf",
            json={"params": {"text": "First line\nSecond line", "title": "Notes"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["files"][0]["filename"] == "Notes.pdf"

        download = client.get(f"/api/blob/{data['files'][0]['handle']}")
        with fitz.open(stream=download.content, filetype="pdf") as doc:
            text = doc[0].get_text()
        assert "Notes" in text
        assert "Second line" in text

    def test_text_to_pdf_blank(self, client, open_session):
        """Test blank text gives 400"""
        session_id = open_session("pdf-generator")

        response = client.post(
            f"/api/pdf/{session_id}/text-to-pdf", json={"params": {"text": "   "}}
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Invalid value"

    def test_annotate(self, client, open_session, pdf_factory):
        """Test annotations sent as a JSON form field"""
        session_id = open_session("pdf-editor")
        annotations = [{"text": "Reviewed", "x": 72, "y": 300, "color": "#0000ff", "page": 2}]

        response = client.post(
            f"/api/pdf/{session_id}/annotate",
            files=[_pdf_file(pdf_factory(2))],
            data={"annotations": json.dumps(annotations)},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["page_count"] == 2
        assert data["files"][0]["filename"] == "report_edited.pdf"

        download = client.get(f"/api/blob/{data['files'][0]['handle']}")
        with fitz.open(stream=download.content, filetype="pdf") as doc:
            assert "Reviewed" in doc[1].get_text()

    def test_annotate_invalid_annotations(self, client, open_session, pdf_factory):
        """Test malformed annotations give 400"""
        session_id = open_session("pdf-editor")

        response = client.post(
            f"/api/pdf/{session_id}/annotate",
            files=[_pdf_file(pdf_factory(1))],
            data={"annotations": json.dumps([{"text": "x", "color": "blue"}])},
        )

        assert response.status_code == 400
        assert response.json()["detail"]["error"] == "Validation failed"
