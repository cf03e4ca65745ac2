from .whisper_backend import STT

__all__ = ["STT"]
