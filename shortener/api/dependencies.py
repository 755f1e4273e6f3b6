"""FastAPI dependencies exposing the objects stored on `app.state`."""

from fastapi import Request

from shortener.auth import TokenService
from shortener.dao.base import URLBaseDAO
from shortener.deletion import DeletionPipeline
from shortener.utils.config import Config


async def get_dao(request: Request) -> URLBaseDAO:
    return request.app.state.dao


async def get_config(request: Request) -> Config:
    return request.app.state.config


async def get_tokens(request: Request) -> TokenService:
    return request.app.state.tokens


async def get_pipeline(request: Request) -> DeletionPipeline:
    return request.app.state.pipeline
