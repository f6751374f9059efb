"""資格情報検証の実装モジュール."""
from .jwt_token_validator import JwtTokenValidator

__all__ = [
    "JwtTokenValidator",
]
