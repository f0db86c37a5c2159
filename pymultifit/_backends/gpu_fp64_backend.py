"""
GPU backend using PyTorch with FP64 precision.

For data center GPUs: A100, H100, V100.
"""

import logging
import warnings
from typing import Optional

import numpy as np

from .base import GPUBackendFP64, SVDFactors, complete_factors

logger = logging.getLogger(__name__)


class PyTorchBackendFP64(GPUBackendFP64):
    """
    PyTorch GPU backend with FP64 precision.

    Singular value filtering compares values against a relative
    tolerance near machine epsilon, so only double precision is offered.
    Only recommended for data center GPUs with full FP64 support.
    """

    def __init__(self, device: Optional[str] = None):
        """Initialize PyTorch FP64 backend."""
        self.name = "pytorch_fp64"
        self.precision = "fp64"

        try:
            import torch
            self.torch = torch
        except ImportError:
            raise ImportError(
                "PyTorch required for GPU backend. "
                "Install: pip install torch"
            )

        # Device selection (no Metal for FP64)
        if device == 'mps':
            raise RuntimeError(
                "FP64 not supported on Apple Metal. "
                "Use the CPU backend."
            )

        if device is None:
            if torch.cuda.is_available():
                device = 'cuda'
            else:
                warnings.warn("No CUDA GPU available, using CPU")
                device = 'cpu'

        self.device = torch.device(device)

        # Warn if using FP64 on gimped hardware
        if device == 'cuda':
            from .precision_detector import detect_gpu_capabilities
            caps = detect_gpu_capabilities()
            if caps.fp64_support.value == 'gimped_fp64':
                warnings.warn(
                    f"Using FP64 on {caps.gpu_name} with gimped FP64 support. "
                    f"This will be ~{int(1/caps.fp64_throughput_ratio)}x slower than FP32.",
                    UserWarning
                )

    def svd(self, A: np.ndarray) -> SVDFactors:
        """Decompose A on the GPU in double precision."""
        torch = self.torch
        n, p = A.shape

        A_gpu = torch.from_numpy(np.ascontiguousarray(A)).double().to(self.device)
        U, S, Vh = torch.linalg.svd(A_gpu, full_matrices=n < p)

        logger.debug("%s svd of %dx%d matrix", self.device, n, p)
        return complete_factors(
            U.cpu().numpy(),
            S.cpu().numpy(),
            Vh.cpu().numpy(),
            p
        )

    def get_device_info(self) -> dict:
        """Get backend information."""
        return {
            'backend': 'gpu',
            'precision': 'fp64',
            'device': str(self.device),
            'library': f'PyTorch {self.torch.__version__}',
        }
