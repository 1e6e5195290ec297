"""
Domain exceptions raised by the services and translated to HTTP responses by
the routers.
"""


class UnknownFieldError(KeyError):
    """A field name that does not exist on the targeted Record entity."""

    def __init__(self, name: str, list_kind: str = "") -> None:
        self.name = name
        self.list_kind = list_kind
        where = f"{list_kind} section" if list_kind else "record"
        super().__init__(f"Unknown {where} field '{name}'")

    def __str__(self) -> str:
        return self.args[0]


class MissingContextError(ValueError):
    """An AI request was made before the fields it depends on were filled in."""

    def __init__(self, title: str, message: str) -> None:
        self.title = title
        super().__init__(message)


class AssistantUnavailableError(RuntimeError):
    """The suggestion / extraction service failed or could not be reached."""


class PersistenceError(RuntimeError):
    """Saved documents could not be read from or written to the store."""
