from typing import Iterator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from core.errors import Unauthorized
from core.session import user_id_from_token
from data.repo import Repo
from push.client import PushClient
from utils.env import Settings

bearer = HTTPBearer(auto_error=False)

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_repo(request: Request) -> Iterator[Repo]:
    # one session per request; nothing survives between requests
    with Session(request.app.state.engine) as session:
        yield Repo(session)

def get_push(request: Request) -> PushClient:
    return request.app.state.push

def current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    settings: Settings = Depends(get_settings),
) -> str:
    if credentials is None:
        raise Unauthorized("Missing bearer token")
    return user_id_from_token(credentials.credentials, settings.jwt_secret)
