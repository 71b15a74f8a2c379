"""Error taxonomy shared by the relay handler and the provider client.

Every error knows the HTTP status it maps to and the fixed body returned to
callers. Bodies never carry provider internals or prompt content.
"""
from __future__ import annotations


class RelayError(Exception):
    """Base class for errors that terminate a relay request."""

    status_code = 500
    error = "Error interno del servidor"
    message = "Ocurrió un error inesperado"

    def __init__(self, detail: str | None = None) -> None:
        # detail is for logs only; it never reaches the response body
        super().__init__(detail or self.error)
        self.detail = detail or self.error

    def to_body(self) -> dict[str, str]:
        return {"error": self.error, "message": self.message}


class ClientInputError(RelayError):
    """Rejected locally before any outbound call."""

    status_code = 400


class MissingPromptError(ClientInputError):
    error = "Falta el prompt"
    message = "El campo 'prompt' es requerido"


class InvalidTypeError(ClientInputError):
    error = "Prompt inválido"
    message = "El prompt debe ser una cadena de texto"


class TooLongError(ClientInputError):
    error = "Prompt demasiado largo"
    message = "El prompt no puede exceder 10,000 caracteres"


class PayloadTooLargeError(ClientInputError):
    status_code = 413
    error = "Cuerpo demasiado grande"
    message = "El cuerpo de la solicitud excede el límite permitido"


class AuthError(RelayError):
    """Provider rejected the configured credential."""

    status_code = 401
    error = "Error de autenticación"
    message = "Clave de API inválida o no autorizada"


class QuotaError(RelayError):
    """Provider usage limit reached."""

    status_code = 429
    error = "Cuota excedida"
    message = "Se ha excedido el límite de uso de la API"


class ProviderError(RelayError):
    """Any other provider failure."""


class EmptyResponseError(ProviderError):
    pass


NOT_FOUND_BODY = {
    "error": "Endpoint no encontrado",
    "message": "La ruta solicitada no existe",
}

ORIGIN_REJECTED_BODY = {
    "error": "Origen no permitido",
    "message": "El origen de la solicitud no está permitido",
}
