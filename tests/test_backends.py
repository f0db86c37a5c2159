"""
Test backend implementations with auto-detection.

Tests appropriate backends based on available hardware:
- CPU: Always tested
- PyTorch CUDA: Tested if NVIDIA GPU available
"""

import pytest
import numpy as np
from pymultifit._backends import (
    get_backend,
    list_available_backends,
    print_backend_info,
    PYTORCH_FP64_AVAILABLE,
)
from pymultifit._backends.base import complete_factors
from pymultifit._backends.precision_detector import (
    detect_gpu_capabilities,
    PrecisionSupport,
    _classify_nvidia_gpu,
)


# Detect hardware once at module level
GPU_CAPS = detect_gpu_capabilities()
HAS_NVIDIA = GPU_CAPS.gpu_type == 'cuda'
HAS_ANY_GPU = GPU_CAPS.has_gpu


class TestBackendDetection:
    """Test hardware detection and backend availability."""

    def test_detect_gpu_capabilities(self):
        """Test GPU detection returns valid capabilities."""
        caps = detect_gpu_capabilities()
        assert caps.gpu_name is not None
        assert caps.gpu_type in ['cuda', 'metal', 'none']
        assert caps.has_gpu == (caps.gpu_type != 'none')

    def test_classify_data_center_gpu(self):
        support, ratio = _classify_nvidia_gpu("NVIDIA A100-SXM4-40GB")
        assert support == PrecisionSupport.FULL_FP64
        assert ratio == 0.5

    def test_classify_consumer_gpu(self):
        support, ratio = _classify_nvidia_gpu("NVIDIA GeForce RTX 4090")
        assert support == PrecisionSupport.GIMPED_FP64
        assert ratio == pytest.approx(1/64)

    @pytest.mark.parametrize("name, support, ratio", [
        ("NVIDIA H200", PrecisionSupport.FULL_FP64, 0.5),
        ("Tesla V100-PCIE-16GB", PrecisionSupport.FULL_FP64, 0.5),
        ("NVIDIA GeForce RTX 2080 Ti", PrecisionSupport.GIMPED_FP64, 1/32),
        ("NVIDIA GeForce GTX 1080", PrecisionSupport.GIMPED_FP64, 1/32),
    ])
    def test_classification_table(self, name, support, ratio):
        assert _classify_nvidia_gpu(name) == (support, pytest.approx(ratio))

    def test_classify_unknown_gpu_warns(self):
        with pytest.warns(UserWarning, match="Unknown NVIDIA GPU"):
            support, _ = _classify_nvidia_gpu("Mystery Accelerator")
        assert support == PrecisionSupport.GIMPED_FP64

    def test_list_backends(self):
        """Test backend listing."""
        backends = list_available_backends()
        assert isinstance(backends, list)
        assert 'cpu' in backends  # CPU always available

        if PYTORCH_FP64_AVAILABLE:
            assert 'pytorch' in backends

    def test_print_backend_info(self, capsys):
        """Test diagnostic printing."""
        print_backend_info()
        captured = capsys.readouterr()
        assert 'Backend Status' in captured.out
        assert 'CPU' in captured.out


class TestCPUBackend:
    """Test CPU backend (always available)."""

    def test_cpu_backend_creation(self):
        """Test CPU backend initializes correctly."""
        backend = get_backend('cpu')
        assert backend is not None
        assert backend.name == 'cpu_fp64'
        assert backend.precision == 'fp64'

    def test_cpu_device_info(self):
        """Test CPU backend device info."""
        backend = get_backend('cpu')
        info = backend.get_device_info()
        assert info['backend'] == 'cpu'
        assert info['precision'] == 'fp64'
        assert 'SciPy' in info['library']

    def test_cpu_svd_reconstructs(self):
        """U diag(S) Q^T equals the input."""
        backend = get_backend('cpu')

        np.random.seed(42)
        A = np.random.randn(20, 4)
        factors = backend.svd(A)

        assert factors.U.shape == (20, 4)
        assert factors.S.shape == (4,)
        assert factors.Q.shape == (4, 4)
        assert np.all(np.diff(factors.S) <= 0)
        np.testing.assert_allclose(
            factors.U @ np.diag(factors.S) @ factors.Q.T, A, atol=1e-12
        )

    def test_cpu_svd_wide_matrix(self):
        """n < p: missing singular values are zero, shapes stay (n, p)."""
        backend = get_backend('cpu')

        np.random.seed(0)
        A = np.random.randn(2, 5)
        factors = backend.svd(A)

        assert factors.U.shape == (2, 5)
        assert factors.S.shape == (5,)
        assert factors.Q.shape == (5, 5)
        np.testing.assert_array_equal(factors.S[2:], 0.0)
        np.testing.assert_array_equal(factors.U[:, 2:], 0.0)
        np.testing.assert_allclose(factors.Q.T @ factors.Q, np.eye(5), atol=1e-12)
        np.testing.assert_allclose(
            factors.U @ np.diag(factors.S) @ factors.Q.T, A, atol=1e-12
        )

    def test_svd_does_not_modify_input(self):
        backend = get_backend('cpu')
        A = np.arange(12.0).reshape(4, 3)
        original = A.copy()
        backend.svd(A)
        np.testing.assert_array_equal(A, original)

    def test_complete_factors_passthrough(self):
        U = np.eye(3)[:, :2]
        S = np.array([2.0, 1.0])
        Vt = np.eye(2)
        factors = complete_factors(U, S, Vt, 2)
        np.testing.assert_array_equal(factors.U, U)
        np.testing.assert_array_equal(factors.S, S)
        np.testing.assert_array_equal(factors.Q, np.eye(2))


@pytest.mark.skipif(not HAS_NVIDIA, reason="NVIDIA GPU not available")
class TestPyTorchBackend:
    """Test PyTorch CUDA backend (NVIDIA GPUs only)."""

    def test_pytorch_backend_creation(self):
        """Test PyTorch backend initializes on CUDA."""
        backend = get_backend('pytorch')
        assert backend is not None
        assert 'pytorch' in backend.name
        assert backend.precision == 'fp64'

    def test_pytorch_device_info(self):
        """Test PyTorch backend device info."""
        backend = get_backend('pytorch')
        info = backend.get_device_info()
        assert info['backend'] == 'gpu'
        assert 'cuda' in str(info['device']).lower()

    def test_pytorch_rejects_mps(self):
        """FP64 backend cannot run on Metal."""
        from pymultifit._backends.gpu_fp64_backend import PyTorchBackendFP64
        with pytest.raises(RuntimeError, match="Apple Metal"):
            PyTorchBackendFP64(device='mps')


class TestAutoBackend:
    """Test automatic backend selection."""

    def test_auto_backend_selects_something(self):
        """Test auto backend returns valid backend."""
        backend = get_backend('auto')
        assert backend is not None
        assert hasattr(backend, 'svd')

    @pytest.mark.skipif(HAS_NVIDIA, reason="Test requires no NVIDIA GPU")
    def test_auto_backend_falls_back_to_cpu(self):
        assert get_backend('auto').name == 'cpu_fp64'

    def test_instance_passes_through(self):
        backend = get_backend('cpu')
        assert get_backend(backend) is backend

    def test_auto_backend_consistency(self):
        """Test auto backend gives deterministic results."""
        backend = get_backend('auto')

        np.random.seed(42)
        A = np.random.randn(30, 3)

        first = backend.svd(A)
        second = backend.svd(A)

        np.testing.assert_array_equal(first.S, second.S)


class TestBackendErrors:
    """Test error handling in backend selection."""

    def test_invalid_backend_name(self):
        """Test error on invalid backend name."""
        with pytest.raises(ValueError, match="Unknown backend"):
            get_backend('invalid_backend')

    def test_gpu_backend_without_gpu(self):
        """Test error when requesting GPU without GPU."""
        if not HAS_ANY_GPU:
            with pytest.raises(ValueError, match="No GPU detected"):
                get_backend('gpu')

    @pytest.mark.skipif(PYTORCH_FP64_AVAILABLE, reason="Test requires PyTorch to be missing")
    def test_pytorch_without_torch(self):
        """Test error when requesting PyTorch without it installed."""
        with pytest.raises(RuntimeError, match="pip install torch"):
            get_backend('pytorch')


if __name__ == '__main__':
    print_backend_info()
    pytest.main([__file__, '-v', '-s'])
