class CatalogError(Exception):
    pass


class ValidationError(CatalogError):
    """Missing or malformed field in a store payload."""

    def __init__(self, messages: list[str]):
        self.messages = messages
        super().__init__("; ".join(messages))


class PhotoError(CatalogError):
    pass


class InvalidMediaType(PhotoError):
    pass


class DecodeError(PhotoError):
    pass


class StorageWriteError(PhotoError):
    pass


class NotFound(CatalogError):
    pass


class Forbidden(CatalogError):
    pass


class PersistenceError(CatalogError):
    pass
