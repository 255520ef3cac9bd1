"""Exceptions raised by the OpMon data source."""


class OpmonError(Exception):
    """Base class for data source errors."""


class UnknownFieldError(OpmonError):
    """An option fetch was requested for a field with no backend resource."""

    def __init__(self, field):
        self.field = field
        super().__init__(f"query syntax error, got no url, unknown type: {field}")
