"""
GPU detection for routing the decomposition.

The SVD is always computed in FP64. A GPU is only chosen automatically
when its FP64 rate is a useful fraction of its FP32 rate; everything
else (consumer cards, Apple Metal, no GPU) decomposes on the CPU.
"""

import warnings
from dataclasses import dataclass
from enum import Enum


class PrecisionSupport(Enum):
    """FP64 support level for hardware."""
    NO_GPU = "no_gpu"
    NO_FP64 = "no_fp64"          # Apple Metal
    GIMPED_FP64 = "gimped_fp64"  # consumer NVIDIA
    FULL_FP64 = "full_fp64"      # data center NVIDIA


# (name fragment, support, FP64/FP32 rate), first match wins
_NVIDIA_FP64_RATES = (
    ('A100', PrecisionSupport.FULL_FP64, 0.5),
    ('A800', PrecisionSupport.FULL_FP64, 0.5),
    ('H100', PrecisionSupport.FULL_FP64, 0.5),
    ('H800', PrecisionSupport.FULL_FP64, 0.5),
    ('H200', PrecisionSupport.FULL_FP64, 0.5),
    ('V100', PrecisionSupport.FULL_FP64, 0.5),
    ('P100', PrecisionSupport.FULL_FP64, 0.5),
    ('RTX 50', PrecisionSupport.GIMPED_FP64, 1/64),
    ('RTX 40', PrecisionSupport.GIMPED_FP64, 1/64),
    ('RTX 30', PrecisionSupport.GIMPED_FP64, 1/64),
    ('RTX 20', PrecisionSupport.GIMPED_FP64, 1/32),
    ('GTX', PrecisionSupport.GIMPED_FP64, 1/32),
)


@dataclass
class GPUCapabilities:
    """
    What the SVD backends need to know about the local GPU.

    Attributes
    ----------
    has_gpu : bool
    gpu_name : str
    gpu_type : str
        'cuda', 'metal' or 'none'
    fp64_support : PrecisionSupport
    fp64_throughput_ratio : float
        FP64 / FP32 throughput
    """
    has_gpu: bool
    gpu_name: str
    gpu_type: str
    fp64_support: PrecisionSupport
    fp64_throughput_ratio: float

    @property
    def gpu_svd_recommended(self) -> bool:
        """Whether auto-selection should put the SVD on this GPU."""
        return self.fp64_support == PrecisionSupport.FULL_FP64


def _cpu_only() -> GPUCapabilities:
    return GPUCapabilities(
        has_gpu=False,
        gpu_name="CPU only",
        gpu_type="none",
        fp64_support=PrecisionSupport.NO_GPU,
        fp64_throughput_ratio=1.0,
    )


def _import_torch():
    try:
        import torch
    except ImportError:
        return None
    return torch


def detect_gpu_capabilities() -> GPUCapabilities:
    """
    Inspect the first CUDA device, then Apple Metal.

    Returns
    -------
    GPUCapabilities
        CPU-only capabilities when PyTorch is missing or sees no GPU
    """
    torch = _import_torch()
    if torch is None:
        return _cpu_only()

    if torch.cuda.is_available():
        gpu_name = torch.cuda.get_device_name(0)
        support, ratio = _classify_nvidia_gpu(gpu_name)
        return GPUCapabilities(True, gpu_name, "cuda", support, ratio)

    mps = getattr(torch.backends, 'mps', None)
    if mps is not None and mps.is_available():
        return GPUCapabilities(True, "Apple Metal GPU", "metal", PrecisionSupport.NO_FP64, 0.0)

    return _cpu_only()


def _classify_nvidia_gpu(gpu_name: str) -> tuple[PrecisionSupport, float]:
    """Look up (support, FP64/FP32 rate) from the device name."""
    gpu_upper = gpu_name.upper()
    for fragment, support, ratio in _NVIDIA_FP64_RATES:
        if fragment in gpu_upper:
            return support, ratio

    warnings.warn(
        f"Unknown NVIDIA GPU '{gpu_name}'. Assuming gimped FP64; "
        "pass backend='pytorch' to decompose on it anyway."
    )
    return PrecisionSupport.GIMPED_FP64, 1/32
