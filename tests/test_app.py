"""HTTP endpoint tests with FastAPI's TestClient."""

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)

SIMPLE = "#if NET8_0_OR_GREATER\nA();\n#else\nB();\n#endif\n"


def _upload(content, name="a.cs", **params):
    return client.post("/clean", files={"file": (name, content, "text/plain")}, params=params)


class TestServiceInfo:

    def test_root(self):
        data = client.get("/").json()
        assert data["service"] == "cond-remover"
        assert data["default_target"] == "NET8_0_OR_GREATER"
        assert data["review_sentinel"] == "NET8_REVIEW_REQUIRED"


class TestClean:

    def test_preview_returned(self):
        response = _upload(SIMPLE.encode("utf-8"))
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "success"
        assert data["preview"] == "A();\n"
        assert data["file_path"] == "a.cs"
        assert data["blocks_removed"] == 1

    def test_review_issues(self):
        code = b"#if NET8_0_OR_GREATER || WINDOWS\nA();\n#endif\n"
        data = _upload(code).json()
        assert data["status"] == "success_with_review"
        assert data["preview"].startswith("#error NET8_REVIEW_REQUIRED: Boolean expression (&&/||)")
        assert data["issues"] == [
            {"line": 1, "message": "Boolean expression (&&/||) - requires manual review"}
        ]

    def test_custom_target_and_define(self):
        code = b"#if NET6_0\nA();\n#else\n#if DEBUG\nB();\n#endif\n#endif\n"
        data = _upload(code, target="NET6_0", define=["DEBUG"]).json()
        assert data["target_symbol"] == "NET6_0"
        assert data["preview"] == "A();\n#if DEBUG\n#endif\n"

    def test_generated_header_skipped(self):
        code = b"// <auto-generated />\n" + SIMPLE.encode("utf-8")
        assert _upload(code).json()["status"] == "skipped"
        assert _upload(code, include_generated=True).json()["status"] == "success"

    def test_rejects_non_cs(self):
        response = _upload(b"x", name="a.txt")
        assert response.status_code == 400
        assert response.json()["detail"] == "Only .cs files allowed"

    def test_rejects_invalid_utf8(self):
        response = _upload(b"\xff\xfe\x00")
        assert response.status_code == 400
        assert response.json()["detail"] == "File is not valid UTF-8"
