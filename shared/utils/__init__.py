from .common import epoch_millis, monotonic_millis

__all__ = ["epoch_millis", "monotonic_millis"]
