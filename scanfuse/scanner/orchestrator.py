"""
==============================================================================
Decode Orchestrator Module
==============================================================================

Fans every image variant out to every applicable decode backend and
concatenates the raw detections.

Backend selection:
------------------
- general backend: whenever any symbology is enabled
- matrix backend: only when a matrix symbology is enabled
- linear backend: only when a linear symbology is enabled

Failure policy:
---------------
A backend exception on one (backend, variant) pair is logged as a
BackendFailure and contributes zero detections; it never aborts the frame.

Concurrency:
------------
The (variant x backend) calls only read their own variant and the frozen
configuration, so with workers > 1 they run on a thread pool. Results are
joined in submission order, so the output is identical to the sequential
run.

==============================================================================
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence, Tuple

from scanfuse.core.exceptions import BackendFailure

from .backends import DecodeBackend
from .configuration import ConfigurationSnapshot
from .models import ImageVariant, RawDetection


# Module logger
logger = logging.getLogger(__name__)


class DecodeOrchestrator:
    """
    Drives all registered backends across the variant matrix.

    Attributes:
        backends: Registered backends, in invocation order
        workers: Thread count for the decode matrix (1 = sequential)

    Example:
        >>> orchestrator = DecodeOrchestrator(default_backends())
        >>> detections = orchestrator.run(variants, config.snapshot())
    """

    def __init__(self, backends: Sequence[DecodeBackend], workers: int = 1) -> None:
        self._backends = list(backends)
        self._workers = max(1, workers)

    @property
    def backends(self) -> List[DecodeBackend]:
        return list(self._backends)

    def select_backends(self, config: ConfigurationSnapshot) -> List[DecodeBackend]:
        """Backends whose domain intersects the enabled symbologies."""
        if not config.any_enabled:
            return []
        return [backend for backend in self._backends if backend.applies_to(config)]

    def run(
        self,
        variants: Sequence[ImageVariant],
        config: ConfigurationSnapshot,
    ) -> List[RawDetection]:
        """
        Decode every (variant, backend) pair.

        Args:
            variants: Output of the preprocessing pipeline
            config: Frozen configuration

        Returns:
            Concatenated detections, variant-major then backend order
        """
        backends = self.select_backends(config)
        if not backends:
            logger.debug("No symbology enabled; no backend invoked")
            return []

        jobs: List[Tuple[ImageVariant, DecodeBackend]] = [
            (variant, backend) for variant in variants for backend in backends
        ]

        if self._workers > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=self._workers) as pool:
                futures = [
                    pool.submit(self._decode_one, backend, variant, config)
                    for variant, backend in jobs
                ]
                batches = [future.result() for future in futures]
        else:
            batches = [
                self._decode_one(backend, variant, config)
                for variant, backend in jobs
            ]

        detections = [detection for batch in batches for detection in batch]
        logger.debug(
            f"{len(detections)} raw detection(s) from {len(variants)} variant(s) "
            f"x {len(backends)} backend(s)"
        )
        return detections

    @staticmethod
    def _decode_one(
        backend: DecodeBackend,
        variant: ImageVariant,
        config: ConfigurationSnapshot,
    ) -> List[RawDetection]:
        """One bounded backend call; failures degrade to no detections."""
        try:
            detections = backend.decode(variant, config)
        except BackendFailure as e:
            logger.warning(f"Backend failure on variant {variant.tag}: {e}")
            return []
        except Exception as e:
            failure = BackendFailure(backend.backend_id, f"{type(e).__name__}: {e}")
            logger.warning(f"Backend failure on variant {variant.tag}: {failure}")
            return []

        logger.debug(
            f"{backend.backend_id} on variant {variant.tag}: {len(detections)} detection(s)"
        )
        return list(detections)
