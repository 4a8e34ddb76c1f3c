"""Domain-specific errors for meshcfg."""


class MeshcfgError(Exception):
    """Base error for meshcfg."""


class SettingsError(MeshcfgError):
    """Raised when the settings file cannot be read or does not conform to schema."""


class DecodeError(MeshcfgError):
    """Raised when a frame payload does not parse as a known radio message."""


class UploadError(MeshcfgError):
    """Raised when the assembled configuration cannot be uploaded."""


class TransportError(MeshcfgError):
    """Base transport error."""


class TransportConnectError(TransportError):
    """Raised when the serial port cannot be opened."""


class TransportSendError(TransportError):
    """Raised when writing to the serial port fails."""


class TransportReadError(TransportError):
    """Raised when reading from the serial port fails."""
