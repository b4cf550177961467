from enum import StrEnum


class Role(StrEnum):
    admin = "admin"
    user = "user"


class StockStatus(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class MovementType(StrEnum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    STOCK_IN = "STOCK_IN"
    STOCK_OUT = "STOCK_OUT"
