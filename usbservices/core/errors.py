"""Domain-specific errors for usbservices."""


class UsbServicesError(Exception):
    """Base error for usbservices."""


class ConfigurationError(UsbServicesError):
    """Raised when the configuration file or an override cannot be used."""


class NativeInitError(UsbServicesError):
    """Raised when the native USB layer fails to initialize."""


class DeviceEnumerationError(UsbServicesError):
    """Raised when listing attached devices fails."""


class ReleaseError(UsbServicesError):
    """Raised when releasing the native handle fails."""


class NativeDriverClosedError(UsbServicesError):
    """Raised when a native handle is used after it was released."""


class ProviderReleasedError(UsbServicesError):
    """Raised when a services provider is used after close()."""
