"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Provides synthetic images, frame sessions, in-memory decode backends and
the API test client.

==============================================================================
"""

import pytest
from typing import Callable, Dict, Generator, List, Optional, Sequence

import numpy as np
from fastapi.testclient import TestClient

from scanfuse.core.dependencies import get_backends
from scanfuse.scanner.backends import DecodeBackend, NativeHit
from scanfuse.scanner.models import ImageFrame, polygon_from_rect
from scanfuse.scanner.session import FrameSession
from scanfuse.scanner.symbology import LINEAR_SYMBOLOGIES, MATRIX_SYMBOLOGIES, Symbology


# ============================================================================
# FAKE BACKENDS
# ============================================================================

FAKE_TAGS = {
    "Code128": Symbology.CODE128,
    "Code39": Symbology.CODE39,
    "EAN13": Symbology.EAN13,
    "UPCA": Symbology.UPCA,
    "QRCode": Symbology.QR,
    "DataMatrix": Symbology.DATAMATRIX,
    "PDF417": Symbology.PDF417,
}


class FakeBackend(DecodeBackend):
    """
    In-memory backend returning canned hits.

    `respond` receives the variant pixels and returns the hits for that
    call; `error` is raised instead when set.
    """

    def __init__(
        self,
        backend_id: str = "fake",
        domain=frozenset(Symbology),
        hits: Sequence[NativeHit] = (),
        respond: Optional[Callable[[np.ndarray], List[NativeHit]]] = None,
        error: Optional[Exception] = None,
    ):
        self.backend_id = backend_id
        self.domain = frozenset(domain)
        self.format_tags = dict(FAKE_TAGS)
        self._hits = list(hits)
        self._respond = respond
        self._error = error
        self.calls: List[Dict] = []

    def _read(self, pixels, formats, max_symbols, try_harder):
        self.calls.append({
            "shape": pixels.shape,
            "formats": formats,
            "max_symbols": max_symbols,
            "try_harder": try_harder,
        })
        if self._error is not None:
            raise self._error
        if self._respond is not None:
            return self._respond(pixels)
        return list(self._hits)


def hit(payload, tag: str, rect=(10, 10, 40, 20)) -> NativeHit:
    """NativeHit with a rectangular polygon in variant coordinates."""
    return NativeHit(payload=payload, format_tag=tag, polygon=polygon_from_rect(*rect))


def bare_hit(payload, tag: str) -> NativeHit:
    """NativeHit without geometry."""
    return NativeHit(payload=payload, format_tag=tag, polygon=())


@pytest.fixture
def fake_backend_factory() -> Callable[..., FakeBackend]:
    """Factory for FakeBackend instances."""
    return FakeBackend


@pytest.fixture
def general_backend() -> FakeBackend:
    """General backend finding one QR code and one EAN-13 on every variant."""
    return FakeBackend(
        backend_id="general",
        hits=[
            hit("https://example.com", "QRCode", rect=(20, 30, 50, 50)),
            hit("036000291452", "EAN13", rect=(80, 40, 60, 20)),
        ],
    )


@pytest.fixture
def matrix_backend() -> FakeBackend:
    """Matrix-only backend finding nothing."""
    return FakeBackend(backend_id="matrix", domain=MATRIX_SYMBOLOGIES)


@pytest.fixture
def linear_backend() -> FakeBackend:
    """Linear-only backend finding nothing."""
    return FakeBackend(backend_id="linear", domain=LINEAR_SYMBOLOGIES)


# ============================================================================
# IMAGE FIXTURES
# ============================================================================

@pytest.fixture
def gray_image() -> np.ndarray:
    """Deterministic 120x160 grayscale image with bars and noise."""
    rng = np.random.default_rng(42)
    image = np.full((120, 160), 230, dtype=np.uint8)
    for x in range(20, 140, 8):
        image[30:90, x:x + 4] = 20
    noise = rng.integers(0, 25, size=image.shape, dtype=np.uint8)
    return np.clip(image.astype(np.int16) - noise, 0, 255).astype(np.uint8)


@pytest.fixture
def bgr_image(gray_image: np.ndarray) -> np.ndarray:
    """Three-channel version of gray_image."""
    return np.dstack([gray_image, gray_image, gray_image])


@pytest.fixture
def frame(bgr_image: np.ndarray) -> ImageFrame:
    """ImageFrame over the BGR test image."""
    return ImageFrame.from_array(bgr_image)


@pytest.fixture
def empty_frame() -> ImageFrame:
    """Zero-sized frame."""
    return ImageFrame.from_array(np.zeros((0, 0, 3), dtype=np.uint8))


# ============================================================================
# SESSION FIXTURES
# ============================================================================

@pytest.fixture
def active_session() -> Generator[FrameSession, None, None]:
    """Started frame session, ended after the test."""
    session = FrameSession()
    session.start()
    yield session
    session.end()


# ============================================================================
# API FIXTURES
# ============================================================================

@pytest.fixture
def client(general_backend: FakeBackend) -> Generator[TestClient, None, None]:
    """Test client with the decode backends replaced by fakes."""
    from scanfuse.main import app

    app.dependency_overrides[get_backends] = lambda: [general_backend]

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


