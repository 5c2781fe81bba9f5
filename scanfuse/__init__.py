"""
Scanfuse - multi-backend barcode scanner.

Fuses zxing-cpp, libdmtx and ZBar decoding with an OpenCV enhancement
chain, and exposes the pipeline through a CLI and a FastAPI service.
"""

__version__ = "1.0.0"
