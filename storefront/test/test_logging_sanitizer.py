"""
Test the logging sanitizer utility.
Secrets and customer personal data must be redacted from logged payloads.
"""

from werkzeug.datastructures import ImmutableMultiDict

from storefront.utils.logging_sanitizer import (
    SENSITIVE_FIELDS,
    sanitize_dict,
    sanitize_exception_message,
    sanitize_payload,
)


def test_sanitize_dict():
    """Test dictionary sanitization"""
    test_data = {
        'name': 'Maria Santos',
        'cpf': '98765432109',
        'email': 'maria@email.com',
        'customer_id': 2,
    }
    result = sanitize_dict(test_data)
    assert result['name'] == 'Maria Santos', "Name should not be redacted"
    assert result['cpf'] == '[REDACTED]', "CPF should be redacted"
    assert result['email'] == '[REDACTED]', "Email should be redacted"
    assert result['customer_id'] == 2, "Ids should not be redacted"

    # Case insensitivity
    result = sanitize_dict({'CPF': '1', 'Email': '2', 'api_KEY': '3'})
    assert set(result.values()) == {'[REDACTED]'}

    # Nested dictionaries and lists of dictionaries
    test_data = {
        'customer': {'name': 'João', 'phone': '11999999999'},
        'lines': [{'product_id': 1, 'quantity': 2}, {'product_id': 2, 'address': 'Rua A'}],
        'tags': ['gift', 'express'],
    }
    result = sanitize_dict(test_data)
    assert result['customer'] == {'name': 'João', 'phone': '[REDACTED]'}
    assert result['lines'][0] == {'product_id': 1, 'quantity': 2}
    assert result['lines'][1]['address'] == '[REDACTED]'
    assert result['tags'] == ['gift', 'express']


def test_sanitize_payload():
    """JSON bodies, query strings and anything else"""
    query = ImmutableMultiDict([('limit', '5'), ('token', 'xyz')])
    assert sanitize_payload(query) == {'limit': '5', 'token': '[REDACTED]'}

    body = {'customer_id': 1, 'postal_code': '01234567'}
    assert sanitize_payload(body) == {'customer_id': 1, 'postal_code': '[REDACTED]'}
    assert body['postal_code'] == '01234567', "Input must not be modified"

    assert sanitize_payload(['raw']) == ['raw']
    assert sanitize_payload(None) is None


def test_all_sensitive_fields():
    """Verify all sensitive fields are properly configured"""
    test_data = {field: f"sensitive_{field}_value" for field in SENSITIVE_FIELDS}

    result = sanitize_dict(test_data)

    for field in SENSITIVE_FIELDS:
        assert result[field] == '[REDACTED]', f"Field '{field}' should be redacted"


def test_sanitize_exception_message():
    error = ValueError("UNIQUE constraint failed: customers.email")
    assert sanitize_exception_message(error) == "ValueError: [Message contains sensitive data]"

    error = ValueError("Order PED1 not found")
    assert sanitize_exception_message(error) == "Order PED1 not found"
