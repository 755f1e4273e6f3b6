"""Request and response bodies of the JSON routes."""

from pydantic import BaseModel, TypeAdapter


class ShortenRequest(BaseModel):
    url: str


class ShortenResponse(BaseModel):
    result: str
    success: bool = True
    message: str = 'OK'


class BatchRequestItem(BaseModel):
    correlation_id: str
    original_url: str


class BatchResponseItem(BaseModel):
    correlation_id: str
    short_url: str


class UserURL(BaseModel):
    short_url: str
    original_url: str


class Stats(BaseModel):
    urls: int
    users: int


BatchRequest = TypeAdapter(list[BatchRequestItem])
DeleteRequest = TypeAdapter(list[str])
