import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import trimesh

from printbay.client import ApiService, FileCache, SimulationService

from conftest import MEMORY_DB


@pytest.fixture()
def make_service(make_settings):
    async def _make(handler, **overrides):
        settings = make_settings(PRINTBAY_API_URL="http://api.test/api", **overrides)
        svc = ApiService(
            settings=settings,
            cache=FileCache(url=MEMORY_DB, settings=settings),
            simulation=SimulationService(delay_scale=0),
            transport=httpx.MockTransport(handler),
        )
        await svc.start()
        return svc

    return _make


def refuse(request):
    raise httpx.ConnectError("connection refused", request=request)


@pytest.mark.asyncio
async def test_real_api_result_passes_through(make_service):
    def handler(request):
        assert request.url.path == "/api/pricing-calculate"
        body = json.loads(request.content)
        assert body["material"] == "pla"
        return httpx.Response(200, json={"success": True, "id": "pricing_1_2"})

    svc = await make_service(handler)
    result = await svc.calculate_pricing("pla", "draft", "white", {"volume": 3})
    await svc.close()
    assert result == {"success": True, "id": "pricing_1_2"}


@pytest.mark.asyncio
async def test_network_error_falls_back_to_simulation(make_service):
    svc = await make_service(refuse)
    quote = await svc.calculate_pricing("pla", "draft", "white", {"volume": 3})
    await svc.close()
    assert quote["simulated"] is True
    assert quote["volume"] == 3


@pytest.mark.asyncio
async def test_non_json_body_falls_back(make_service):
    svc = await make_service(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
    options = await svc.get_pricing_options()
    await svc.close()
    assert "materials" in options


@pytest.mark.asyncio
async def test_server_error_falls_back(make_service):
    svc = await make_service(lambda request: httpx.Response(503, json={"success": False}))
    order = await svc.track_order("TPB-1")
    await svc.close()
    assert order["simulated"] is True


@pytest.mark.asyncio
async def test_error_raised_when_fallback_disabled(make_service):
    svc = await make_service(refuse, ENABLE_SIMULATION_FALLBACK=False)
    assert svc.get_status()["simulationFallback"] is False
    with pytest.raises(httpx.ConnectError):
        await svc.create_order({"fileName": "a.stl"}, {}, {"email": "ada@example.com"})

    svc.set_simulation_fallback(True)
    order = await svc.create_order({"fileName": "a.stl"}, {}, {"email": "ada@example.com"})
    await svc.close()
    assert order["orderNumber"].startswith("PB")


@pytest.mark.asyncio
async def test_upload_caches_before_sending(make_service):
    seen = {}

    def handler(request):
        seen["content_type"] = request.headers["content-type"]
        return httpx.Response(200, json={"success": True, "fileId": "f-1", "uploadUrl": "local://cache/f-1"})

    svc = await make_service(handler)
    result = await svc.upload_file("cube.stl", b"solid cube\nendsolid cube\n", "model/stl")
    assert seen["content_type"].startswith("multipart/form-data")
    assert result["fileId"] == "f-1"
    assert await svc.cache.has_file(result["cacheId"])
    await svc.close()


@pytest.mark.asyncio
async def test_measure_cached_box(make_service):
    svc = await make_service(refuse)
    stl = trimesh.creation.box(extents=(10, 20, 30)).export(file_type="stl")
    uploaded = await svc.upload_file("box.stl", stl)
    assert uploaded["simulated"] is True

    stats = await svc.measure_cached_file(uploaded["cacheId"])
    await svc.close()
    assert stats["volume"] == pytest.approx(6.0)
    assert stats["dimensions"] == {"x": 10.0, "y": 20.0, "z": 30.0}
    assert stats["watertight"] is True
    assert stats["faces"] == 12


@pytest.mark.asyncio
async def test_measure_unparseable_or_missing(make_service):
    svc = await make_service(refuse)
    uploaded = await svc.upload_file("junk.stl", b"not a mesh at all")
    assert await svc.measure_cached_file(uploaded["cacheId"]) is None
    assert await svc.measure_cached_file("file_missing") is None
    await svc.close()


@pytest.mark.asyncio
async def test_start_sweeps_stale_files(make_settings):
    settings = make_settings()
    now = [datetime(2024, 3, 1, tzinfo=timezone.utc)]
    cache = FileCache(
        url=MEMORY_DB,
        max_age=timedelta(days=7),
        recency=timedelta(days=1),
        clock=lambda: now[0],
        settings=settings,
    )
    await cache.init()
    await cache.store_file("old.stl", b"x")
    now[0] += timedelta(days=30)

    svc = ApiService(settings=settings, cache=cache, transport=httpx.MockTransport(refuse))
    assert await svc.start() == 1
    assert await svc.cache.list_files() == []
    await svc.close()
