"""Shared fixtures: tiny real images, a scripted provider and a fake HTTP session."""

import io
from unittest.mock import MagicMock

import pytest
import requests
from loguru import logger
from PIL import Image

from tinyshrink.results import ShrinkResult


def make_image_bytes(fmt: str, color=(200, 30, 30), size=(16, 16)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


class FakeProvider:
    """
    Provider that answers from a list of scripted responses.

    Each entry is either a ShrinkResult or an exception to raise.
    Records (content_type, uploaded bytes) per call.
    """

    def __init__(self, responses, session=None):
        self.responses = list(responses)
        self.calls = []
        self.session = session

    def shrink(self, data, content_type):
        payload = data if isinstance(data, bytes) else data.read()
        self.calls.append((content_type, payload))
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp


def make_response(body: bytes = b"", error: Exception = None):
    resp = MagicMock()
    if error is not None:
        resp.raise_for_status.side_effect = error
    resp.iter_content.return_value = [body[:5], body[5:]]
    return resp


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes("JPEG")


@pytest.fixture
def png_bytes():
    return make_image_bytes("PNG")


@pytest.fixture
def small_jpeg_bytes():
    return make_image_bytes("JPEG", size=(4, 4))


@pytest.fixture
def small_png_bytes():
    return make_image_bytes("PNG", size=(4, 4))


@pytest.fixture
def download_session():
    """Session whose get() serves bodies from session.bodies keyed by URL."""
    session = MagicMock(spec=requests.Session)
    session.bodies = {}

    def fake_get(url, stream=False, timeout=None):
        body = session.bodies.get(url)
        if isinstance(body, Exception):
            raise body
        if body is None:
            return make_response(error=requests.HTTPError(f"404 Client Error: Not Found for url: {url}"))
        return make_response(body)

    session.get.side_effect = fake_get
    return session


@pytest.fixture
def ok_result():
    def _make(url="https://tinyjpg.com/backend/opt/output/abc", ratio=0.8):
        return ShrinkResult(output_url=url, ratio=ratio)
    return _make


@pytest.fixture
def fake_provider_factory(download_session):
    def _make(*responses):
        return FakeProvider(responses, session=download_session)
    return _make



@pytest.fixture(autouse=True)
def reset_logger():
    # main() points loguru at whatever sys.stderr is, capsys swaps that per test
    yield
    logger.remove()
