"""
Tests for transcription, model and asset API endpoints.
These tests mock the TranscriptionPipeline so no executable is needed.
"""

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock, patch

from core.config import Settings
from core.constants import ErrorKind, OutputFormat
from models.schemas import (
    AssetBatch,
    FailedAsset,
    ModelResult,
    ProvisionResult,
    TranscriptionOutput,
    TranscriptionResult,
)

TRANSCRIPT = {"transcription": [{"text": " Hello world."}]}


@pytest.fixture
def settings(tmp_path, monkeypatch):
    settings = Settings(TEMP_DIR=str(tmp_path / "uploads"), MAX_UPLOAD_SIZE_MB=1)
    monkeypatch.setattr("internal.api.routes.transcribe_routes.get_settings", lambda: settings)
    return settings


@pytest.fixture
def mock_pipeline():
    """Create a mock TranscriptionPipeline."""
    pipeline = MagicMock()
    pipeline.transcribe = AsyncMock()
    pipeline.ensure_assets = AsyncMock()
    return pipeline


@pytest.fixture
def mock_cache():
    cache = MagicMock()
    cache.ensure_model = AsyncMock()
    cache.list_available_models.return_value = {"tiny": True, "base": False}
    return cache


@pytest.fixture
def client(settings, mock_pipeline, mock_cache):
    """Create test client with mocked dependencies."""
    from core.dependencies import (
        get_model_cache_dependency,
        get_transcription_pipeline_dependency,
    )
    from internal.api.routes.asset_routes import router as asset_router
    from internal.api.routes.transcribe_routes import router as transcribe_router

    app = FastAPI()
    app.include_router(transcribe_router)
    app.include_router(asset_router)

    app.dependency_overrides[get_transcription_pipeline_dependency] = lambda: mock_pipeline
    app.dependency_overrides[get_model_cache_dependency] = lambda: mock_cache

    return TestClient(app)


def upload(client, content=b"ID3 fake mp3", **form):
    return client.post(
        "/transcribe",
        files={"file": ("speech.MP3", content, "audio/mpeg")},
        data=form,
    )


class TestTranscribeEndpoint:
    def test_success(self, client, mock_pipeline, settings):
        mock_pipeline.transcribe.return_value = TranscriptionResult(
            success=True,
            message="Whisper process completed successfully.",
            outputs=[
                TranscriptionOutput(
                    format=OutputFormat.JSON, content=TRANSCRIPT, path="/tmp/x.wav.json"
                )
            ],
        )

        response = upload(client, model="tiny", language="en")

        assert response.status_code == 200
        body = response.json()
        assert body["error_code"] == 0
        assert body["message"] == "Transcription successful"
        assert body["data"]["output"][0]["type"] == "json"
        assert body["data"]["output"][0]["data"] == TRANSCRIPT

        input_path, model, language = mock_pipeline.transcribe.await_args.args
        assert input_path.startswith(settings.temp_dir)
        assert input_path.endswith(".mp3")
        assert (model, language) == ("tiny", "en")

    def test_upload_and_derived_files_are_removed(self, client, mock_pipeline, settings):
        seen = {}

        async def transcribe(input_path, model, language):
            seen["input"] = input_path
            with open(f"{input_path}.TEMP.wav", "wb") as f:
                f.write(b"RIFF")
            return TranscriptionResult(success=True, message="ok")

        mock_pipeline.transcribe.side_effect = transcribe

        upload(client)

        assert not Path(seen["input"]).exists()
        assert not Path(f"{seen['input']}.TEMP.wav").exists()

    def test_defaults_are_left_to_pipeline(self, client, mock_pipeline):
        mock_pipeline.transcribe.return_value = TranscriptionResult(success=True, message="ok")

        upload(client)

        _, model, language = mock_pipeline.transcribe.await_args.args
        assert model is None
        assert language is None

    def test_missing_file(self, client, mock_pipeline):
        response = client.post("/transcribe", data={"model": "tiny"})

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide a valid audio file."
        mock_pipeline.transcribe.assert_not_awaited()

    @pytest.mark.parametrize(
        "kind, status",
        [
            (ErrorKind.INVALID_MODEL, 400),
            (ErrorKind.TRANSPORT_FAILURE, 502),
            (ErrorKind.SUBPROCESS_FAILURE, 500),
            (None, 500),
        ],
    )
    def test_pipeline_failure_status(self, client, mock_pipeline, kind, status):
        mock_pipeline.transcribe.return_value = TranscriptionResult.failure(
            "something went wrong", kind, exit_code=2
        )

        response = upload(client)

        assert response.status_code == status
        body = response.json()
        assert body["error_code"] == 1
        assert body["message"] == "something went wrong"
        assert body["errors"]["exitCode"] == 2

    def test_file_too_large(self, client, mock_pipeline):
        response = upload(client, content=b"x" * (1024 * 1024 + 1))

        assert response.status_code == 413
        mock_pipeline.transcribe.assert_not_awaited()


class TestModelEndpoints:
    def test_list_models(self, client):
        response = client.get("/models")

        assert response.status_code == 200
        assert response.json()["data"] == {"tiny": True, "base": False}

    def test_download_model(self, client, mock_cache):
        mock_cache.ensure_model.return_value = ModelResult(
            success=True,
            message="Model base downloaded",
            model_name="base",
            model_file="/models/ggml-base.bin",
        )

        response = client.post("/models/base")

        assert response.status_code == 200
        assert response.json()["data"]["modelFile"] == "/models/ggml-base.bin"
        mock_cache.ensure_model.assert_awaited_once_with("base")

    def test_invalid_model(self, client, mock_cache):
        mock_cache.ensure_model.return_value = ModelResult(
            success=False,
            message="Invalid model: huge",
            error_kind=ErrorKind.INVALID_MODEL,
        )

        response = client.post("/models/huge")

        assert response.status_code == 400
        assert response.json()["errors"]["errorKind"] == "InvalidModel"


class TestProvisionEndpoint:
    def test_provision_all(self, client, mock_pipeline):
        mock_pipeline.ensure_assets.return_value = ProvisionResult(success=True)

        response = client.post("/assets/provision")

        assert response.status_code == 200
        assert response.json()["message"] == "Assets installed"
        mock_pipeline.ensure_assets.assert_awaited_once_with(None)

    def test_provision_selected_components(self, client, mock_pipeline):
        mock_pipeline.ensure_assets.return_value = ProvisionResult(success=True)

        client.post("/assets/provision", json={"components": ["whisper"]})

        mock_pipeline.ensure_assets.assert_awaited_once_with(["whisper"])

    def test_unsupported_platform(self, client, mock_pipeline):
        mock_pipeline.ensure_assets.return_value = ProvisionResult.fatal(
            "Unsupported platform: darwin", ErrorKind.UNSUPPORTED_PLATFORM
        )

        response = client.post("/assets/provision")

        assert response.status_code == 501
        assert response.json()["message"] == "Unsupported platform: darwin"

    def test_partial_failure(self, client, mock_pipeline):
        mock_pipeline.ensure_assets.return_value = ProvisionResult(
            success=False,
            files=AssetBatch(
                failed=(
                    FailedAsset(
                        id="linux/linux/ffmpeg",
                        filename="ffmpeg",
                        url="https://assets.example.com/bin/linux/ffmpeg",
                        error="HTTP 404",
                    ),
                )
            ),
        )

        response = client.post("/assets/provision")

        assert response.status_code == 502
        failed = response.json()["errors"]["files"]["failed"]
        assert failed[0]["id"] == "linux/linux/ffmpeg"


class TestHealthEndpoint:
    @pytest.fixture
    def health_client(self, mock_cache, linux_x64):
        from internal.api.routes.health_routes import create_health_routes

        app = FastAPI()
        app.state.provision_result = {"success": True}
        app.include_router(create_health_routes(app))

        with patch("core.container.get_model_cache", return_value=mock_cache), patch(
            "infrastructure.assets.detect_platform_target", return_value=linux_x64
        ):
            yield app

    def test_healthy(self, health_client, mock_cache):
        mock_cache.list_available_models.return_value = {"base": True}
        found = {"whisper": "/bin/whisper", "ffmpeg": "/bin/ffmpeg", "ffprobe": "/bin/ffprobe"}

        with patch("core.dependencies.check_executables", return_value=found):
            response = TestClient(health_client).get("/health")

        data = response.json()["data"]
        assert data["status"] == "healthy"
        assert data["platform"] == "linux/x64"
        assert data["default_model"] == {"name": "base", "cached": True}
        assert data["provisioning"] == {"success": True}

    def test_missing_executable_is_unhealthy(self, health_client, mock_cache):
        mock_cache.list_available_models.return_value = {"base": True}
        found = {"whisper": None, "ffmpeg": "/bin/ffmpeg", "ffprobe": "/bin/ffprobe"}

        with patch("core.dependencies.check_executables", return_value=found):
            response = TestClient(health_client).get("/health")

        body = response.json()
        assert body["data"]["status"] == "unhealthy"
        assert body["message"] == "Service unhealthy: assets missing"
