import json
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from ..data.base import CallerIdentity, PropertyStore

# Cookie names the front end may use for the Supabase session, in priority order
ACCESS_TOKEN_COOKIES = ("sb-access-token", "supabase-access-token", "supabase-auth-token")

@dataclass
class Caller:
    identity: Optional[CallerIdentity] = None
    premium: bool = False

    @property
    def user_id(self) -> Optional[str]:
        return self.identity.user_id if self.identity else None

def parse_cookie_token(value: str | None) -> str | None:
    """
    Cookie values are either the bare token or a JSON session object with an
    `access_token` field.
    """
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None
    if trimmed.startswith("{"):
        try:
            parsed = json.loads(trimmed)
        except ValueError:
            return trimmed
        if isinstance(parsed, dict) and isinstance(parsed.get("access_token"), str):
            return parsed["access_token"]
    return trimmed

def extract_access_token(request: Request) -> str | None:
    """Bearer header wins; otherwise the first usable session cookie."""
    authorization = request.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:]
    for key in ACCESS_TOKEN_COOKIES:
        token = parse_cookie_token(request.cookies.get(key))
        if token:
            return token
    return None

async def resolve_caller(request: Request, store: PropertyStore) -> Caller:
    """
    Identity is optional: no token, or a token the store rejects, means an
    anonymous, non-premium caller.
    """
    token = extract_access_token(request)
    if not token:
        return Caller()
    identity = await store.user_for_token(token)
    if identity is None:
        return Caller()
    return Caller(identity=identity, premium=await store.is_premium(identity.user_id))
