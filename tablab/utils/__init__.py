from .config import DEFAULT_CONFIG, KernelConfig


__all__ = [
    "DEFAULT_CONFIG",
    "KernelConfig",
]
