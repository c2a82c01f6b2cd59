from __future__ import annotations

from typing import List, Optional
from pydantic import AliasChoices, BaseModel, Field

class Attachment(BaseModel):
    name: str = Field(..., max_length=255)
    type: str = Field(..., max_length=100)
    contentText: Optional[str] = Field(default=None, max_length=100_000)
    dataUrl: Optional[str] = Field(default=None, max_length=10_000_000)

    @property
    def is_image(self) -> bool:
        return self.type.lower().startswith("image/")

class ApiKeys(BaseModel):
    # primary: direct-provider key, secondary: search-provider key
    primary: Optional[str] = Field(
        default=None, max_length=500, validation_alias=AliasChoices("primary", "openrouter")
    )
    secondary: Optional[str] = Field(
        default=None, max_length=500, validation_alias=AliasChoices("secondary", "tavily")
    )

class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=5000)
    model: Optional[str] = None
    maxTokens: Optional[int] = Field(default=None, ge=100, le=32768)
    temperature: Optional[float] = Field(default=None, ge=0, le=2)
    systemPrompt: Optional[str] = Field(default=None, max_length=10_000)
    attachments: Optional[List[Attachment]] = Field(default=None, max_length=10)
    apiKeys: Optional[ApiKeys] = None

class Source(BaseModel):
    title: str
    url: str
    snippet: str = ""
    domain: str = ""

class Meta(BaseModel):
    model: str
    fallbackUsed: bool
    isAutoMode: bool
    generatedImages: Optional[bool] = None

class SearchResponse(BaseModel):
    summary: str
    query: str
    images: Optional[List[str]] = None
    sources: Optional[List[Source]] = None
    meta: Meta

class ErrorResponse(BaseModel):
    error: str

class CatalogEntry(BaseModel):
    id: str
    name: str
    description: str = ""
    isFree: bool = False
    contextLength: Optional[int] = None

class GatewayModelEntry(BaseModel):
    id: str
    multimodal: bool
    imageGeneration: bool

class ModelsResponse(BaseModel):
    autoModes: List[str]
    defaults: dict[str, str]
    gateway: List[GatewayModelEntry]
    direct: List[CatalogEntry]
