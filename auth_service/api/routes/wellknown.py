"""
api/routes/wellknown.py
-----------------------
GET /.well-known/jwks.json — public key set for access-token verification,
for services that verify this service's tokens through a JWKS URI.
"""

from fastapi import APIRouter, Request

router = APIRouter(tags=["Keys"])


@router.get("/.well-known/jwks.json", summary="Public signing keys (JWKS)")
async def jwks(request: Request) -> dict:
    return request.app.state.token_config.public_jwks()
