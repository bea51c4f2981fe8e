"""Bearer Token 校验与鉴权逻辑。"""

from fastapi import Header, HTTPException, status

from filesync.core.config import get_settings


def _parse_bearer(authorization: str | None) -> str | None:
    """解析 "Bearer <token>"，格式不对返回 None。"""
    scheme, _, token = (authorization or "").strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


async def verify_bearer_token(
    authorization: str | None = Header(None, alias="Authorization"),
) -> str:
    """
    校验请求头中的 Authorization: Bearer <token>。
    若配置了 APP_API_TOKENS 则必须携带且匹配；未配置时（开发）不强制校验。
    """
    settings = get_settings()
    valid_tokens = settings.get_valid_api_tokens()

    if not valid_tokens:
        if settings.is_production:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Server misconfiguration: no API tokens configured",
            )
        return _parse_bearer(authorization) or "dev-no-token"

    if not (authorization or "").strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
        )
    token = _parse_bearer(authorization)
    if token is None or token not in valid_tokens:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing bearer token",
        )
    return token
