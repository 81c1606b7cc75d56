class DashboardError(Exception):
    """Base class for every error raised by the dashboard."""


class StartupError(DashboardError):
    """Configuration needed before serving is missing or invalid."""


class DirectoryError(DashboardError):
    """The device directory could not be queried."""

    kind = "Upstream error"

    def describe(self) -> str:
        return f"{self.kind}: {self}"


class TransportError(DirectoryError):
    """The network exchange with the directory API did not complete."""

    kind = "Upstream request failed"


class DecodeError(DirectoryError):
    """The directory API answered, but the body did not match the expected schema."""

    kind = "Upstream response could not be decoded"


class InternalRenderError(DashboardError):
    """Rendering a well-formed device list failed. Always a bug."""
