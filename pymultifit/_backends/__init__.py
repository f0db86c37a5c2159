"""
Backend selection and management.

Provides a unified decomposition service on CPU (SciPy/LAPACK) and
NVIDIA GPU (PyTorch, FP64).
"""

import logging
import warnings

from .base import BackendBase, SVDFactors
from .precision_detector import detect_gpu_capabilities, GPUCapabilities

logger = logging.getLogger(__name__)

# Try importing CPU backend (always available)
try:
    from .cpu_fp64_backend import CPUBackendFP64
    CPU_AVAILABLE = True
except ImportError:
    CPU_AVAILABLE = False
    warnings.warn("CPU backend unavailable - installation error!")

# PyTorch backend (NVIDIA GPU); the module itself imports torch lazily
try:
    import torch  # noqa: F401
    from .gpu_fp64_backend import PyTorchBackendFP64
    PYTORCH_FP64_AVAILABLE = True
except ImportError:
    PYTORCH_FP64_AVAILABLE = False


def get_backend(backend='auto') -> BackendBase:
    """
    Get decomposition backend.

    Parameters
    ----------
    backend : str or BackendBase
        Backend selection:
        - 'auto': GPU if it has full-rate FP64, otherwise CPU
        - 'cpu': CPU with SciPy/LAPACK (FP64)
        - 'gpu': Any available CUDA GPU
        - 'pytorch': Force PyTorch (CUDA if present)
        An existing backend instance is returned unchanged.

    Returns
    -------
    BackendBase
        Backend instance

    Examples
    --------
    >>> backend = get_backend('auto')
    >>> backend = get_backend('cpu')
    """
    if isinstance(backend, BackendBase):
        return backend

    if backend == 'auto':
        caps = detect_gpu_capabilities()

        if caps.gpu_type == 'cuda' and caps.gpu_svd_recommended and PYTORCH_FP64_AVAILABLE:
            logger.debug("auto backend: pytorch_fp64 on %s", caps.gpu_name)
            return PyTorchBackendFP64()

        if not CPU_AVAILABLE:
            raise RuntimeError("No backends available!")
        logger.debug("auto backend: cpu_fp64")
        return CPUBackendFP64()

    elif backend == 'cpu':
        if not CPU_AVAILABLE:
            raise RuntimeError("CPU backend unavailable!")
        return CPUBackendFP64()

    elif backend == 'gpu':
        caps = detect_gpu_capabilities()

        if not caps.has_gpu:
            raise ValueError(
                "No GPU detected.\n"
                "Options:\n"
                "  - Use backend='cpu'\n"
                "  - Install PyTorch with CUDA for NVIDIA"
            )

        if caps.gpu_type != 'cuda':
            raise RuntimeError(
                f"{caps.gpu_name} has no FP64 support. Use backend='cpu'."
            )

        if not PYTORCH_FP64_AVAILABLE:
            raise RuntimeError(
                "NVIDIA GPU detected but PyTorch unavailable.\n"
                "Install: pip install torch"
            )
        return PyTorchBackendFP64()

    elif backend == 'pytorch':
        if not PYTORCH_FP64_AVAILABLE:
            raise RuntimeError(
                "PyTorch backend unavailable.\n"
                "Install: pip install torch"
            )
        return PyTorchBackendFP64()

    else:
        raise ValueError(
            f"Unknown backend: '{backend}'\n"
            f"Valid options: 'auto', 'cpu', 'gpu', 'pytorch'"
        )


def list_available_backends() -> list:
    """List names of available backends."""
    backends = []
    if CPU_AVAILABLE:
        backends.append('cpu')
    if PYTORCH_FP64_AVAILABLE:
        backends.append('pytorch')
    return backends


def print_backend_info():
    """Print detailed backend information (diagnostic)."""
    caps = detect_gpu_capabilities()

    print("pymultifit Backend Status")
    print("=" * 50)
    print("\nAvailable Backends:")
    print(f"  CPU (FP64):          {'yes' if CPU_AVAILABLE else 'no'} - LAPACK SVD")
    print(f"  PyTorch (FP64):      {'yes' if PYTORCH_FP64_AVAILABLE else 'no'} - torch.linalg.svd")

    print("\nHardware Detection:")
    if caps.has_gpu:
        print(f"  GPU Type: {caps.gpu_type}")
        print(f"  GPU Name: {caps.gpu_name}")
        print(f"  FP64 Support: {caps.fp64_support.value}")
    else:
        print("  No GPU detected")

    print("\nRecommended Backend:")
    try:
        backend = get_backend('auto')
        print(f"  {backend.name}")
    except (RuntimeError, ValueError) as e:
        print(f"  Error: {e}")


__all__ = [
    'get_backend',
    'list_available_backends',
    'print_backend_info',
    'BackendBase',
    'SVDFactors',
    'GPUCapabilities',
    'detect_gpu_capabilities',
    'CPU_AVAILABLE',
    'PYTORCH_FP64_AVAILABLE',
]


if __name__ == "__main__":
    print_backend_info()
