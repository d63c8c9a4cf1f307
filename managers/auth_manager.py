from fastapi import HTTPException, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import List, Optional, Literal, Any, TypedDict, cast
from jwt.algorithms import RSAAlgorithm
import jwt
import requests
import os
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class JWKKey(TypedDict, total=False):
    kty: str
    use: str
    kid: str
    n: str
    e: str


class JWTPayload(TypedDict, total=False):
    sub: str
    oid: str
    azp: str
    scp: str
    exp: int
    iat: int
    iss: str
    aud: str


def _tenant_id() -> str:
    tenant_id = os.getenv("SIMPAY_AUTH_TENANT_ID")
    if not tenant_id:
        raise ValueError("SIMPAY_AUTH_TENANT_ID is not set")
    return tenant_id


class AuthManager:
    """Validates admin bearer tokens against the tenant's published signing keys."""
    _instance: Optional["AuthManager"] = None
    jwt_keys: List[JWKKey] = []

    def __new__(cls):
        if cls._instance is None:
            instance = super().__new__(cls)
            instance.jwt_keys = instance._get_jwt_keys()
            cls._instance = instance
        return cls._instance

    def _get_jwt_keys(self) -> List[JWKKey]:
        tenant_id = _tenant_id()
        openid_config_url = f"https://{tenant_id}.ciamlogin.com/{tenant_id}/v2.0/.well-known/openid-configuration"
        try:
            config_response = requests.get(openid_config_url, timeout=10)
            config_response.raise_for_status()
            jwks_uri = config_response.json().get("jwks_uri")
            if not jwks_uri:
                raise ValueError("jwks_uri missing from OpenID configuration")

            keys_response = requests.get(jwks_uri, timeout=10)
            keys_response.raise_for_status()
            return cast(List[JWKKey], keys_response.json()["keys"])
        except requests.exceptions.RequestException as e:
            raise ValueError(f"Could not fetch signing keys: {e}")

    def reload_jwt_keys(self) -> None:
        self.jwt_keys = self._get_jwt_keys()

    def get_signing_key(self, jwt_token: str) -> Any:
        kid = jwt.get_unverified_header(jwt_token).get("kid")
        for key in self.jwt_keys:
            if key.get("kid") == kid:
                return RSAAlgorithm.from_jwk({k: key.get(k) for k in ("kty", "kid", "use", "n", "e")})
        logger.info(f"No signing key for kid {kid}; known: {[key.get('kid') for key in self.jwt_keys]}")
        raise ValueError(f"Signing key not found. kid: {kid}")

    def verify_jwt_token(self, jwt_token: str, keys_reloaded: bool = False) -> JWTPayload:
        tenant_id = _tenant_id()
        try:
            decoded = jwt.decode(
                jwt_token,
                self.get_signing_key(jwt_token),
                audience=os.getenv("SIMPAY_AUTH_AUDIENCE"),
                issuer=f"https://{tenant_id}.ciamlogin.com/{tenant_id}/v2.0",
                algorithms=["RS256"],
            )
            return cast(JWTPayload, decoded)
        except (jwt.exceptions.InvalidTokenError, ValueError) as e:
            # Keys may have rotated since start-up.
            if not keys_reloaded:
                self.reload_jwt_keys()
                return self.verify_jwt_token(jwt_token, keys_reloaded=True)
            raise HTTPException(
                status_code=401,
                detail=f"Invalid token: {e}",
                headers={"WWW-Authenticate": "Bearer"},
            )


security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> JWTPayload:
    try:
        return AuthManager().verify_jwt_token(credentials.credentials)
    except ValueError as e:
        raise HTTPException(
            status_code=401,
            detail=f"Authentication error: {e}",
            headers={"WWW-Authenticate": "Bearer"},
        )


Scope = Literal[
    "forms.write",
    "license.read",
]


def requires_scope(required_scope: Scope):
    """Dependency factory for admin endpoints."""

    def scope_validator(token_data: JWTPayload = Depends(get_current_user)) -> JWTPayload:
        admin_client_id = os.getenv("SIMPAY_AUTH_ADMIN_CLIENT_ID")
        if admin_client_id and token_data.get("azp") == admin_client_id:
            return token_data
        scopes = token_data.get("scp", "").split()
        if required_scope not in scopes:
            raise HTTPException(
                status_code=403,
                detail=f"Missing required scope: {required_scope}",
            )
        return token_data

    return scope_validator
