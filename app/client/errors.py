"""
Gahoi Sathi — User-facing error copy

One table maps an error category to the message shown to members, in
English and Hindi.  ``get_error_message`` picks the category from an
``ApiError`` status code or a ``NetworkError``.
"""

from __future__ import annotations

from app.client.api import ApiError, NetworkError

SUPPORTED_LANGUAGES = ("en", "hi")

ERROR_MESSAGES: dict[str, dict[str, str]] = {
    "network_error": {
        "en": "Unable to connect to server. Please check your internet connection.",
        "hi": "सर्वर से कनेक्ट नहीं हो सका। कृपया अपना इंटरनेट कनेक्शन जांचें।",
    },
    "bad_request": {
        "en": "Invalid request. Please check your input.",
        "hi": "अमान्य अनुरोध। कृपया अपनी जानकारी जांचें।",
    },
    "unauthorized": {
        "en": "Please login to continue.",
        "hi": "जारी रखने के लिए कृपया लॉगिन करें।",
    },
    "forbidden": {
        "en": "You do not have permission to perform this action.",
        "hi": "आपको यह कार्य करने की अनुमति नहीं है।",
    },
    "not_found": {
        "en": "The requested resource was not found.",
        "hi": "अनुरोधित जानकारी नहीं मिली।",
    },
    "conflict": {
        "en": "This resource already exists.",
        "hi": "यह पहले से मौजूद है।",
    },
    "validation_error": {
        "en": "Please check your input and try again.",
        "hi": "कृपया अपनी जानकारी जांचें और फिर से प्रयास करें।",
    },
    "too_many_requests": {
        "en": "Too many requests. Please try again later.",
        "hi": "बहुत अधिक अनुरोध। कृपया बाद में प्रयास करें।",
    },
    "server_error": {
        "en": "Server error. Please try again later.",
        "hi": "सर्वर त्रुटि। कृपया बाद में प्रयास करें।",
    },
    "service_unavailable": {
        "en": "Service temporarily unavailable. Please try again later.",
        "hi": "सेवा अस्थायी रूप से उपलब्ध नहीं है। कृपया बाद में प्रयास करें।",
    },
    "timeout": {
        "en": "The server took too long to respond. Please try again.",
        "hi": "सर्वर ने जवाब देने में बहुत समय लिया। कृपया फिर से प्रयास करें।",
    },
    "unknown_error": {
        "en": "An error occurred. Please try again.",
        "hi": "एक त्रुटि हुई। कृपया फिर से प्रयास करें।",
    },
}

STATUS_CATEGORIES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    422: "validation_error",
    429: "too_many_requests",
    500: "server_error",
    503: "service_unavailable",
    504: "timeout",
}

# The server's own wording is more specific than the generic copy here.
_PREFER_SERVER_MESSAGE = {400, 409, 422}


def error_category(error: Exception) -> str:
    if isinstance(error, NetworkError):
        return "network_error"
    if isinstance(error, ApiError):
        return STATUS_CATEGORIES.get(error.status_code, "unknown_error")
    return "unknown_error"


def get_error_message(error: Exception, language: str = "en") -> str:
    """User-facing copy for ``error`` in ``language`` (falls back to English)."""
    if language not in SUPPORTED_LANGUAGES:
        language = "en"
    if (
        isinstance(error, ApiError)
        and error.status_code in _PREFER_SERVER_MESSAGE
        and error.message
        and language == "en"
    ):
        return error.message
    return ERROR_MESSAGES[error_category(error)][language]
