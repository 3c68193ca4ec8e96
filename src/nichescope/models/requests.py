"""Inputs accepted by the analysis workflows."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class ExistingAnalysis(BaseModel):
    main_pain: Optional[str] = None
    key_pain_points: list[str] = []


class DeepAnalysisRequest(BaseModel):
    trend_title: str = Field(min_length=1)
    trend_category: str = ""
    why_trending: str = ""
    existing_analysis: Optional[ExistingAnalysis] = None


class RedditPost(BaseModel):
    title: str
    subreddit: str
    score: int = 0
    selftext: Optional[str] = None


class RedditData(BaseModel):
    posts: list[RedditPost] = []
    communities: list[str] = []


class YoutubeVideo(BaseModel):
    title: str
    channel: str
    description: str = ""


class YoutubeData(BaseModel):
    videos: list[YoutubeVideo] = []


class RelatedQuery(BaseModel):
    query: str
    growth: str = ""


class GoogleTrendsData(BaseModel):
    growth_rate: Optional[float] = None
    related_queries: list[RelatedQuery] = []


class SourceSynthesis(BaseModel):
    key_insights: list[str] = []
    sentiment_summary: str = ""
    content_gaps: list[str] = []
    recommended_angles: list[str] = []


class NicheSources(BaseModel):
    reddit: Optional[RedditData] = None
    youtube: Optional[YoutubeData] = None
    google_trends: Optional[GoogleTrendsData] = None
    synthesis: Optional[SourceSynthesis] = None


class NicheAnalysisRequest(BaseModel):
    niche: str = Field(min_length=1)
    description: str = ""
    target_audience: Optional[str] = None
    existing_problems: Optional[str] = None
    sources: Optional[NicheSources] = None


class TrendInfo(BaseModel):
    title: str = Field(min_length=1)
    category: Optional[str] = None
    why_trending: Optional[str] = None


class SegmentSummary(BaseModel):
    name: str
    size: str = ""
    willingness_to_pay: Optional[str] = None


class AudienceSummary(BaseModel):
    primary: str = ""
    segments: list[SegmentSummary] = []


class PainSummary(BaseModel):
    main_pain: str = Field(min_length=1)
    key_pain_points: list[str] = []
    target_audience: Optional[AudienceSummary] = None
    opportunities: list[str] = []
    risks: list[str] = []


class Competitor(BaseModel):
    name: str
    website: Optional[str] = None
    description: Optional[str] = None


class CompetitionSummary(BaseModel):
    competitors: list[Competitor] = []
    strategic_positioning: Optional[str] = None


class ProductSpecRequest(BaseModel):
    trend: TrendInfo
    analysis: PainSummary
    competition: Optional[CompetitionSummary] = None
