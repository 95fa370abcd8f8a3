"""Tests for the /rjs HTTP endpoint."""
import sys
import textwrap
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.routers.rjs import get_profile
from rjs_filter.policy.profile import RJsProfile

SOURCE = "define([], function () { return 42; });\n"

COPY_OPTIMIZER = textwrap.dedent("""\
    import json
    import shutil
    import sys

    profile_path = sys.argv[sys.argv.index("-o") + 1]
    with open(profile_path, encoding="utf-8") as fp:
        profile = json.loads(fp.read()[1:-1])
    shutil.copyfile(profile["paths"][profile["name"]], profile["out"])
""")

FAILING_OPTIMIZER = textwrap.dedent("""\
    import sys

    print("Error: parse error", file=sys.stderr)
    sys.exit(1)
""")


@pytest.fixture
def js_root(tmp_path: Path) -> Path:
    root = tmp_path / "js"
    (root / "app").mkdir(parents=True)
    (root / "app" / "main.js").write_text(SOURCE, encoding="utf-8")
    return root


@pytest.fixture
def client_for(tmp_path: Path, js_root: Path):
    """Build a TestClient whose r.js is the given stand-in script."""
    def _make(script_body: str, node_path: str = sys.executable) -> TestClient:
        script = tmp_path / "r.py"
        script.write_text(script_body, encoding="utf-8")
        profile = RJsProfile.v1(
            r_path=str(script),
            base_url=str(js_root),
            node_path=node_path,
        )
        app.dependency_overrides[get_profile] = lambda: profile
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


class TestOptimizeEndpoint:

    def test_health(self):
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_round_trip(self, client_for):
        client = client_for(COPY_OPTIMIZER)
        response = client.post("/rjs/optimize", json={
            "content": SOURCE,
            "config": {"external": ["jquery"], "options": {"optimize": "none"}},
        })
        assert response.status_code == 200
        body = response.json()
        assert body["content"] == SOURCE
        assert body["receipt"]["input_sha256"] == body["receipt"]["output_sha256"]

    def test_optimizer_failure_422(self, client_for):
        client = client_for(FAILING_OPTIMIZER)
        response = client.post("/rjs/optimize", json={"content": SOURCE})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["exit_code"] == 1
        assert "parse error" in detail["stderr"]

    def test_missing_interpreter_500(self, client_for, tmp_path: Path):
        client = client_for(COPY_OPTIMIZER, node_path=str(tmp_path / "no-node"))
        response = client.post("/rjs/optimize", json={"content": SOURCE})
        assert response.status_code == 500

    def test_unresolved_module_400(self, client_for, js_root: Path):
        client = client_for(COPY_OPTIMIZER)
        response = client.post("/rjs/optimize", json={
            "content": SOURCE,
            "source_root": str(js_root),
            "source_path": "app/main.js",
            "config": {"options": {"modules": [{"name": "admin/index"}]}},
        })
        assert response.status_code == 400

    def test_module_without_name_422(self, client_for):
        client = client_for(COPY_OPTIMIZER)
        response = client.post("/rjs/optimize", json={
            "content": SOURCE,
            "config": {"options": {"modules": [{"include": ["x"]}]}},
        })
        assert response.status_code == 422

    def test_output_location_option_rejected(self, client_for):
        client = client_for(COPY_OPTIMIZER)
        response = client.post("/rjs/optimize", json={
            "content": SOURCE,
            "config": {"options": {"out": "/etc/cron.d/job"}},
        })
        assert response.status_code == 422
        assert "out" in response.json()["detail"][0]["msg"]

    def test_base_url_inside_module_rejected(self, client_for):
        client = client_for(COPY_OPTIMIZER)
        response = client.post("/rjs/optimize", json={
            "content": SOURCE,
            "config": {"options": {"modules": [{"name": "app/main", "baseUrl": "/"}]}},
        })
        assert response.status_code == 422
