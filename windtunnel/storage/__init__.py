from windtunnel.storage.store import SavedTest, SavedTestStore

__all__ = ["SavedTest", "SavedTestStore"]
