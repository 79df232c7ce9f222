"""Pydantic models shared by the engine and the API."""

from typing import Literal

from pydantic import BaseModel, Field


class Match(BaseModel):
    """A rectangle in page space (bottom-left origin, y is the bottom edge)."""

    page_index: int = Field(ge=0)
    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)
    text: str = ""


class SelectionRect(BaseModel):
    """A drag rectangle in viewport space (top-left origin), already unscaled."""

    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)
    page_index: int = Field(ge=0)
    viewport_height: float  # unscaled page height


class SavedConfig(BaseModel):
    mode: Literal["auto", "manual"] = "auto"
    search_text: str = ""
    new_address: str = ""
    manual_selection: Match | None = None


# -- API bodies --


class UploadResponse(BaseModel):
    doc_id: str
    page_count: int


class SearchRequest(BaseModel):
    query: str


class SearchResponse(BaseModel):
    query: str
    found: bool
    message: str
    matches: list[Match]


class DragRequest(BaseModel):
    page_index: int = Field(ge=0)
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    scale: float  # display px per page unit
    viewport_height: float  # display px


class SelectionResponse(BaseModel):
    match: Match | None
    message: str


class ProcessRequest(BaseModel):
    mode: Literal["auto", "manual"] = "auto"
    new_address: str
    shift_x: float = 0.0
    shift_y: float = 0.0


class PageTextResponse(BaseModel):
    page_count: int
    text: str
