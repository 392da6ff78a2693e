"""
Excepciones personalizadas del servicio de cancelaciones.
"""


class CancellationServiceError(Exception):
    """Error base del servicio de cancelaciones."""

    def __init__(self, message: str, code: str = "CANCELLATION_ERROR"):
        self.message = message
        self.code = code
        # Se asigna cuando ya existe un registro de auditoría para el intento
        self.cancellation_id: str | None = None
        super().__init__(message)


class ValidationError(CancellationServiceError):
    """Faltan campos obligatorios en la petición."""

    def __init__(self, message: str):
        super().__init__(message=message, code="VALIDATION_ERROR")


class NotFoundError(CancellationServiceError):
    """La vendor key no existe (equivale a una key inválida)."""

    def __init__(self, vendor_key: str):
        super().__init__(message="Invalid vendorKey", code="VENDOR_NOT_FOUND")
        self.vendor_key = vendor_key


class ConfigurationError(CancellationServiceError):
    """El procesador está configurado pero faltan credenciales o vendor id."""

    def __init__(self, processor: str, message: str):
        super().__init__(message=message, code="CONFIGURATION_ERROR")
        self.processor = processor


class UnsupportedProcessorError(CancellationServiceError):
    """El vendor no tiene un procesador soportado."""

    def __init__(self, processor: str | None):
        super().__init__(
            message="Unsupported payment processor",
            code="UNSUPPORTED_PROCESSOR",
        )
        self.processor = processor


class UpstreamProcessorError(CancellationServiceError):
    """El procesador de pagos rechazó o falló la cancelación."""

    def __init__(self, processor: str, message: str):
        super().__init__(message=message, code="UPSTREAM_PROCESSOR_ERROR")
        self.processor = processor


class PersistenceError(CancellationServiceError):
    """No se pudo escribir el registro de auditoría."""

    def __init__(self, message: str):
        super().__init__(
            message=f"Failed to persist cancellation record: {message}",
            code="PERSISTENCE_ERROR",
        )


class CredentialDecryptionError(CancellationServiceError):
    """La credencial cifrada no pudo descifrarse."""

    def __init__(self, message: str = "Failed to decrypt credential"):
        super().__init__(message=message, code="CREDENTIAL_DECRYPTION_FAILED")


class AdminAuthenticationError(CancellationServiceError):
    """Token de administración ausente o inválido."""

    def __init__(self):
        super().__init__(
            message="Invalid or missing admin token",
            code="ADMIN_AUTH_FAILED",
        )
