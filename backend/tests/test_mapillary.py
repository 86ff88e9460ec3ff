"""Mapillary image lookup, with the Graph API faked by httpx.MockTransport."""
import httpx
import pytest

from geoexplorer.exceptions import (
    ConfigurationError,
    InternalError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from geoexplorer.services.mapillary import IMAGE_FIELDS, MapillaryClient, build_bbox, parse_coordinate


def client_for(handler, token="test-token", **kwargs) -> MapillaryClient:
    return MapillaryClient(token, transport=httpx.MockTransport(handler), **kwargs)


def respond_with(status_code=200, **kwargs):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, **kwargs)

    return handler, requests


class TestBoundingBox:

    @pytest.mark.parametrize("lat,lon", [(0.0, 0.0), (40.7128, -74.0060), (-33.8688, 151.2093), (89.995, 179.995)])
    def test_box_is_centered_with_fixed_half_width(self, lat, lon):
        assert build_bbox(lat, lon) == [lon - 0.01, lat - 0.01, lon + 0.01, lat + 0.01]

    def test_params(self):
        client = MapillaryClient("tok")
        params = client.build_params(51.5074, -0.1278)
        assert params["bbox"] == f"{-0.1278 - 0.01},{51.5074 - 0.01},{-0.1278 + 0.01},{51.5074 + 0.01}"
        assert params["is_pano"] == "true"
        assert params["limit"] == 1
        assert params["fields"] == IMAGE_FIELDS
        assert params["access_token"] == "tok"


class TestParseCoordinate:

    def test_parses_strings(self):
        assert parse_coordinate("40.7128", "latitude", 90) == 40.7128

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, value):
        with pytest.raises(ValidationError, match="required"):
            parse_coordinate(value, "latitude", 90)

    @pytest.mark.parametrize("value", ["abc", "nan", "inf", "91", "-90.5"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_coordinate(value, "latitude", 90)


class TestLocate:

    @pytest.mark.asyncio
    async def test_returns_first_image(self, mapillary_image):
        second = dict(mapillary_image, id="other")
        handler, requests = respond_with(json={"data": [mapillary_image, second]})

        image = await client_for(handler).locate(40.7128, -74.0060)

        assert image.image_id == "498763468214164"
        assert image.image_url == "https://scontent.example/original.jpg"
        assert image.coordinates == [-74.0061, 40.7127]
        assert image.compass_angle == 172.5
        assert image.true_lat_lon() == (40.7127, -74.0061)

        assert len(requests) == 1
        request = requests[0]
        assert request.url.path == "/images"
        assert request.url.params["access_token"] == "test-token"
        assert request.url.params["is_pano"] == "true"
        assert request.url.params["limit"] == "1"
        assert request.url.params["bbox"] == ",".join(
            str(v) for v in build_bbox(40.7128, -74.0060)
        )

    @pytest.mark.asyncio
    async def test_falls_back_to_thumbnail(self, mapillary_image):
        del mapillary_image["thumb_original_url"]
        handler, _ = respond_with(json={"data": [mapillary_image]})

        image = await client_for(handler).locate(40.7128, -74.0060)

        assert image.image_url == "https://scontent.example/thumb_1024.jpg"

    @pytest.mark.asyncio
    async def test_missing_optional_fields(self):
        handler, _ = respond_with(json={"data": [{"id": "1"}]})

        image = await client_for(handler).locate(10, 10)

        assert image.image_url is None
        assert image.coordinates is None
        assert image.compass_angle is None
        assert not image.is_playable

    @pytest.mark.asyncio
    async def test_accepts_query_strings(self, mapillary_image):
        handler, requests = respond_with(json={"data": [mapillary_image]})

        await client_for(handler).locate("40.7128", "-74.0060")

        assert requests[0].url.params["bbox"] == ",".join(str(v) for v in build_bbox(40.7128, -74.0060))

    @pytest.mark.asyncio
    async def test_missing_token(self):
        handler, requests = respond_with(json={"data": []})

        with pytest.raises(ConfigurationError):
            await client_for(handler, token=None).locate(40.7128, -74.0060)
        with pytest.raises(ConfigurationError):
            await client_for(handler, token="").locate(None, None)
        assert requests == []

    @pytest.mark.asyncio
    async def test_missing_coordinates(self):
        handler, requests = respond_with(json={"data": []})

        with pytest.raises(ValidationError) as exc_info:
            await client_for(handler).locate(None, "2")
        assert exc_info.value.status_code == 400
        assert requests == []

    @pytest.mark.asyncio
    async def test_no_results(self):
        handler, _ = respond_with(json={"data": []})

        with pytest.raises(NotFoundError) as exc_info:
            await client_for(handler).locate(0, 0)
        assert exc_info.value.status_code == 404
        assert not isinstance(exc_info.value, UpstreamError)

    @pytest.mark.asyncio
    async def test_provider_error_body_is_forwarded(self):
        body = {"error": {"message": "Invalid OAuth access token", "code": 190}}
        handler, _ = respond_with(status_code=401, json=body)

        with pytest.raises(UpstreamError) as exc_info:
            await client_for(handler).locate(0, 0)
        assert exc_info.value.status_code == 401
        assert exc_info.value.payload == body

    @pytest.mark.asyncio
    async def test_provider_error_without_parseable_body(self):
        handler, _ = respond_with(status_code=503, text="<html>down</html>")

        with pytest.raises(UpstreamError) as exc_info:
            await client_for(handler).locate(0, 0)
        assert exc_info.value.status_code == 503
        assert exc_info.value.payload == {"error": "Failed to fetch image from Mapillary. Status: 503"}

    @pytest.mark.asyncio
    async def test_timeout_is_upstream_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamError) as exc_info:
            await client_for(handler, timeout=2.0).locate(0, 0)
        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_network_failure_is_internal_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(InternalError) as exc_info:
            await client_for(handler).locate(0, 0)
        assert exc_info.value.payload == {"error": "Server error while fetching image from Mapillary."}

    @pytest.mark.asyncio
    async def test_malformed_success_body_is_internal_error(self):
        handler, _ = respond_with(text="not json")

        with pytest.raises(InternalError):
            await client_for(handler).locate(0, 0)
