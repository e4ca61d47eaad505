"""
Logging Sanitizer Utility

Sanitizes request payloads before they reach the logs.
Secrets and customer personal data (CPF, e-mail, phone, address) are redacted.
"""

from typing import Dict, Any, Mapping
from werkzeug.datastructures import MultiDict


# Credentials that should never be logged
SECRET_FIELDS = {
    'password',
    'secret',
    'secret_key',
    'token',
    'api_key',
    'apikey',
    'auth_token',
    'access_token',
    'refresh_token',
    'session_id',
    'credit_card',
    'creditcard',
    'cvv',
}

# Customer personal data
PII_FIELDS = {
    'cpf',
    'email',
    'phone',
    'address',
    'postal_code',
}

SENSITIVE_FIELDS = SECRET_FIELDS | PII_FIELDS


def sanitize_dict(data: Dict[str, Any], redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Sanitize a dictionary by replacing sensitive field values with redaction text.

    Nested dictionaries and lists of dictionaries (e.g. order lines) are walked.

    Example:
        >>> sanitize_dict({'name': 'Maria', 'cpf': '98765432109'})
        {'name': 'Maria', 'cpf': '[REDACTED]'}
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if str(key).lower() in SENSITIVE_FIELDS:
            sanitized[key] = redact_text
        elif isinstance(value, Mapping):
            sanitized[key] = sanitize_dict(dict(value), redact_text)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(dict(item), redact_text) if isinstance(item, Mapping) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized


def sanitize_payload(payload: Any, redact_text: str = '[REDACTED]') -> Any:
    """
    Sanitize a request payload for logging.

    Accepts JSON bodies (dict), werkzeug MultiDicts (query strings, forms) or
    anything else, which is returned unchanged.
    """
    if isinstance(payload, MultiDict):
        return sanitize_dict(payload.to_dict(), redact_text)
    if isinstance(payload, Mapping):
        return sanitize_dict(dict(payload), redact_text)
    return payload


def sanitize_exception_message(exception: Exception) -> str:
    """
    Hide exception messages that mention a sensitive field.

    Database driver errors echo bound parameters, which can include
    customer data.
    """
    message = str(exception)

    if any(field in message.lower() for field in SENSITIVE_FIELDS):
        return f"{type(exception).__name__}: [Message contains sensitive data]"

    return message
