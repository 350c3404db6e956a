from indexable.config.settings import ClientSettings, IndexableSettings, ObservabilitySettings

__all__ = ["ClientSettings", "IndexableSettings", "ObservabilitySettings"]
