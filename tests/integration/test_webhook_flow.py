"""Integration tests for the complete webhook flow."""

import json
import sys
from pathlib import Path
from typing import Any

import pytest
from starlette.testclient import TestClient

from shove.events import decode_event
from shove.main import create_app
from shove.utils.config_loader import load_config
from shove.webhook.handler import WebhookHandler
from tests.fixtures.webhook_payloads import encode_payload, gitea_signature, github_signature

DUMP_ENV_SCRIPT = (
    "import json, os, sys; "
    "json.dump({k: v for k, v in os.environ.items() if k.startswith('SHOVE_')}, "
    "open(sys.argv[1], 'w'))"
)


class TestWebhookFlow:
    """Integration tests from HTTP request to executed command."""

    @pytest.fixture
    def output_file(self, tmp_path: Path) -> Path:
        """File the configured command writes its environment to."""
        return tmp_path / "env.json"

    @pytest.fixture
    def client(self, tmp_path: Path, output_file: Path, webhook_secret: str) -> TestClient:
        """Client for an app configured from a real YAML file."""
        command = json.dumps([sys.executable, "-c", DUMP_ENV_SCRIPT, str(output_file)])
        config_file = tmp_path / "shove.yaml"
        config_file.write_text(
            "actions:\n"
            "  - name: dump environment\n"
            "    on:\n"
            "      - events: [push]\n"
            "        repos: [octocat/website]\n"
            "    run:\n"
            f"      command: {command}\n"
        )
        config = load_config(config_file)
        assert config.validate() == []

        handler = WebhookHandler(
            secret_key=webhook_secret,
            callback=config.handle_event,
            event_decoder=decode_event,
        )
        return TestClient(create_app(handler))

    def _post(
        self,
        client: TestClient,
        payload: dict[str, Any],
        signature_headers: dict[str, str],
        event_type: str = "push",
    ) -> Any:
        return client.post(
            "/",
            content=encode_payload(payload),
            headers={
                "X-GitHub-Event": event_type,
                "X-GitHub-Delivery": "72d3162e-cc78-11e3-81ab-4c9367dc0958",
                "Content-Type": "application/json",
                **signature_headers,
            },
        )

    def test_github_push_runs_command(
        self,
        client: TestClient,
        output_file: Path,
        webhook_secret: str,
        sample_push_payload: dict[str, Any],
    ) -> None:
        """Test that a signed push runs the matching command before responding."""
        body = encode_payload(sample_push_payload)
        signature = github_signature(webhook_secret, body)

        response = self._post(client, sample_push_payload, {"X-Hub-Signature": signature})

        assert response.status_code == 204
        env = json.loads(output_file.read_text())
        assert env["SHOVE_VAR_REF"] == "refs/heads/main"
        assert env["SHOVE_VAR_BRANCH"] == "main"
        assert env["SHOVE_VAR_COMMIT"] == "a" * 40
        assert env["SHOVE_VAR_REPO_NAME"] == "website"
        assert env["SHOVE_VAR_REPO_OWNER"] == "octocat"
        assert json.loads(env["SHOVE_PAYLOAD"]) == sample_push_payload

    def test_gitea_push_runs_command(
        self,
        client: TestClient,
        output_file: Path,
        webhook_secret: str,
        sample_push_payload: dict[str, Any],
    ) -> None:
        """Test the same flow with a Gitea signature."""
        body = encode_payload(sample_push_payload)
        signature = gitea_signature(webhook_secret, body)

        response = self._post(client, sample_push_payload, {"X-Gitea-Signature": signature})

        assert response.status_code == 204
        assert json.loads(output_file.read_text())["SHOVE_VAR_BRANCH"] == "main"

    def test_push_to_other_repo_runs_nothing(
        self,
        client: TestClient,
        output_file: Path,
        webhook_secret: str,
        sample_push_payload: dict[str, Any],
    ) -> None:
        """Test that accepted events without matching actions still get 204."""
        sample_push_payload["repository"]["owner"]["name"] = "someone"
        body = encode_payload(sample_push_payload)
        signature = github_signature(webhook_secret, body)

        response = self._post(client, sample_push_payload, {"X-Hub-Signature": signature})

        assert response.status_code == 204
        assert not output_file.exists()

    def test_ping_is_acknowledged(
        self, client: TestClient, output_file: Path, webhook_secret: str
    ) -> None:
        """Test that GitHub's delivery check succeeds without running anything."""
        payload = {"zen": "Practicality beats purity.", "hook_id": 42}
        signature = github_signature(webhook_secret, encode_payload(payload))

        response = self._post(client, payload, {"X-Hub-Signature": signature}, event_type="ping")

        assert response.status_code == 204
        assert not output_file.exists()

    def test_forged_push_runs_nothing(
        self,
        client: TestClient,
        output_file: Path,
        sample_push_payload: dict[str, Any],
    ) -> None:
        """Test that a push signed with the wrong secret is rejected."""
        signature = github_signature("wrong-secret", encode_payload(sample_push_payload))

        response = self._post(client, sample_push_payload, {"X-Hub-Signature": signature})

        assert response.status_code == 401
        assert response.text == "invalid signature header"
        assert not output_file.exists()

    def test_malformed_push_is_bad_request(
        self, client: TestClient, output_file: Path, webhook_secret: str
    ) -> None:
        """Test that a push with wrongly typed fields is rejected."""
        payload = {"ref": ["refs/heads/main"]}
        signature = github_signature(webhook_secret, encode_payload(payload))

        response = self._post(client, payload, {"X-Hub-Signature": signature})

        assert response.status_code == 400
        assert response.text == "field ref must be a string"
        assert not output_file.exists()

    def test_health(self, client: TestClient) -> None:
        """Test the health endpoint next to the webhook."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
