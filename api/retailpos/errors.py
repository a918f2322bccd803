from enum import Enum


class ErrorType(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    INSUFFICIENT_STOCK = "insufficient_stock"
    PAYMENT_MISMATCH = "payment_mismatch"
    CREDIT_LIMIT = "credit_limit"
    DATABASE = "database"
    INTERNAL_ERROR = "internal_error"


# Map error types to HTTP status codes
ERROR_STATUS_MAP = {
    ErrorType.VALIDATION: 400,
    ErrorType.NOT_FOUND: 404,
    ErrorType.CONFLICT: 409,
    ErrorType.AUTHENTICATION: 401,
    ErrorType.AUTHORIZATION: 403,
    ErrorType.INSUFFICIENT_STOCK: 409,
    ErrorType.PAYMENT_MISMATCH: 400,
    ErrorType.CREDIT_LIMIT: 409,
    ErrorType.DATABASE: 500,
    ErrorType.INTERNAL_ERROR: 500,
}

# PostgreSQL error codes surfaced to users, with their Turkish messages
DB_ERROR_MESSAGES = {
    "23505": (ErrorType.CONFLICT, "Bu kayıt zaten mevcut"),
    "23503": (ErrorType.CONFLICT, "Bu kayıt başka kayıtlar tarafından kullanılıyor"),
    "23502": (ErrorType.VALIDATION, "Geçersiz veri"),
    "23514": (ErrorType.VALIDATION, "Geçersiz veri"),
}

DEFAULT_DB_ERROR = (ErrorType.DATABASE, "Veritabanı hatası")
