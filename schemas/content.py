from pydantic import BaseModel, ConfigDict
from typing import Optional, Union


class HashableContent(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    title: str
    description: str
    url: Optional[str] = None
    # Unix epoch milliseconds
    timestamp: int


class NormalizedContent(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    title: str
    description: str
    url: str
    timestamp: int


class ContentHashResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    hash: str
    timestamp: int
    algorithm: str


class VerificationResult(BaseModel):
    id: Optional[Union[int, str]] = None
    verified: bool
    current_hash: Optional[str] = None
    expected_hash: Optional[str] = None
