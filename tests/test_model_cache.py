"""
Tests for the whisper model cache.
"""

import pytest

from core.constants import ALL_MODELS, ErrorKind, WHISPER_MODELS
from core.errors import InvalidModelError
from infrastructure.whisper.model_cache import ModelCache

SOURCE = "https://hf.example/ggerganov/whisper.cpp"
DIARIZE_SOURCE = "https://hf.example/akashmjn/tinydiarize-whisper.cpp"


@pytest.fixture
def cache(tmp_path, downloader):
    return ModelCache(
        models_dir=tmp_path / "models",
        downloader=downloader,
        source_url=SOURCE,
        diarize_source_url=DIARIZE_SOURCE,
        concurrency=3,
    )


class TestModelUrls:
    def test_model_path(self, cache, tmp_path):
        assert cache.model_path("base.en") == tmp_path / "models" / "ggml-base.en.bin"

    def test_standard_model_url(self, cache):
        assert cache.model_url("tiny") == f"{SOURCE}/resolve/main/ggml-tiny.bin"

    def test_diarize_model_url(self, cache):
        assert (
            cache.model_url("small.en-tdrz")
            == f"{DIARIZE_SOURCE}/resolve/main/ggml-small.en-tdrz.bin"
        )


class TestEnsureModel:
    @pytest.mark.asyncio
    async def test_cached_model_needs_no_download(self, cache, downloader):
        path = cache.model_path("tiny")
        path.parent.mkdir(parents=True)
        path.write_bytes(b"ggml")

        result = await cache.ensure_model("tiny")

        assert result.success
        assert result.model_file == str(path)
        assert result.handle.exists()
        assert downloader.requests == []

    @pytest.mark.asyncio
    async def test_missing_model_is_downloaded(self, cache, downloader):
        result = await cache.ensure_model("base")

        assert result.success
        assert downloader.requests == [f"{SOURCE}/resolve/main/ggml-base.bin"]
        assert cache.model_path("base").exists()
        assert result.to_dict() == {
            "success": True,
            "message": result.message,
            "modelName": "base",
            "modelFile": str(cache.model_path("base")),
        }

    @pytest.mark.asyncio
    async def test_invalid_model_lists_valid_names(self, cache, downloader):
        result = await cache.ensure_model("bogus")

        assert not result.success
        assert result.error_kind == ErrorKind.INVALID_MODEL
        for name in WHISPER_MODELS:
            assert name in result.message
        assert downloader.requests == []

    def test_unknown_name_raises_invalid_model(self):
        with pytest.raises(InvalidModelError) as exc_info:
            ModelCache._validate_name("bogus")

        assert exc_info.value.kind == ErrorKind.INVALID_MODEL

    @pytest.mark.asyncio
    async def test_download_failure(self, cache, downloader):
        downloader.fail(cache.model_url("small"))

        result = await cache.ensure_model("small")

        assert not result.success
        assert result.error_kind == ErrorKind.TRANSPORT_FAILURE
        assert "small" in result.message
        assert not cache.model_path("small").exists()

    @pytest.mark.asyncio
    async def test_all_downloads_every_model(self, cache, downloader):
        result = await cache.ensure_model(ALL_MODELS)

        assert result.success
        assert [d.model_name for d in result.details] == list(WHISPER_MODELS)
        assert sorted(downloader.requests) == sorted(cache.model_url(n) for n in WHISPER_MODELS)
        assert result.message == f"{len(WHISPER_MODELS)}/{len(WHISPER_MODELS)} models ready"

    @pytest.mark.asyncio
    async def test_all_reports_partial_failure(self, cache, downloader):
        downloader.fail(cache.model_url("large"))

        result = await cache.ensure_model(ALL_MODELS)

        assert not result.success
        failed = [d.model_name for d in result.details if not d.success]
        assert failed == ["large"]
        assert cache.model_path("medium").exists()


    @pytest.mark.asyncio
    async def test_all_survives_unexpected_error(self, cache, downloader):
        broken = cache.model_url("small")
        original = downloader.download

        async def download(url, destination):
            if url == broken:
                raise RuntimeError("disk controller reset")
            return await original(url, destination)

        downloader.download = download

        result = await cache.ensure_model(ALL_MODELS)

        assert not result.success
        assert len(result.details) == len(WHISPER_MODELS)
        failed = [d for d in result.details if not d.success]
        assert [d.model_name for d in failed] == ["small"]
        assert "disk controller reset" in failed[0].message
        assert cache.model_path("large").exists()
        assert cache.model_path("tiny").exists()

class TestListModels:
    @pytest.mark.asyncio
    async def test_list_reflects_disk(self, cache):
        await cache.ensure_model("tiny.en")

        status = cache.list_available_models()

        assert status["tiny.en"] is True
        assert status["large"] is False
        assert list(status) == list(WHISPER_MODELS)
