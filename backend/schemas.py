"""Pydantic schemas for API request/response."""

from pydantic import BaseModel, ConfigDict, computed_field, field_validator
from pydantic.alias_generators import to_camel

import report


class CamelModel(BaseModel):
    """Responses are serialized with camelCase keys (titleLength, hasH1, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeRequest(BaseModel):
    """Request body for POST /api/analyze."""

    url: str

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("URL is required and must be a non-empty string")
        return normalized


class ReportSummary(CamelModel):
    """Row in the saved reports list."""

    id: str
    url: str
    title: str | None = None
    description: str | None = None
    title_length: int
    description_length: int
    has_title: bool
    has_description: bool
    has_keywords: bool
    has_h1: bool
    created_at: str
    updated_at: str

    @computed_field(alias="essentialsPresent")
    @property
    def essentials_present(self) -> int:
        return report.essentials_present(dict(self))


class SeoReport(ReportSummary):
    """Full stored report, plus the display score derived from it."""

    keywords: str | None = None
    headings: str | None = None
    meta_tags: str | None = None
    ai_analysis: str

    @computed_field(alias="seoScore")
    @property
    def seo_score(self) -> int:
        return report.seo_score(dict(self))

    @computed_field(alias="scoreBand")
    @property
    def score_band(self) -> str:
        return report.score_band(self.seo_score)


class AnalysisResponse(CamelModel):
    """Response for POST /api/analyze and GET /api/reports/{id}."""

    success: bool = True
    data: SeoReport


class DeleteResponse(CamelModel):
    success: bool = True
    message: str


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ReportPage(CamelModel):
    reports: list[ReportSummary]
    pagination: Pagination


class ReportListResponse(CamelModel):
    """Response for GET /api/reports."""

    success: bool = True
    data: ReportPage


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
