from .audio_storage import AudioLocator, LocalAudioStorage

__all__ = ["AudioLocator", "LocalAudioStorage"]
