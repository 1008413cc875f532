"""
Guidance API Endpoints

POST /v1/guidance/goal            - Best passage for a goal
POST /v1/guidance/goal/more       - Load more passages for a goal
GET  /v1/guidance/themes/{theme}  - Thematic collection (404 when unavailable)
GET  /v1/guidance/daily           - Daily passage
POST /v1/guidance/recommendation  - Passage personalized to goals and habits

The router owns no matching logic: it validates the request, calls the
engine resolved through get_engine(), and maps the engine's value objects
to response models.

Patterns Applied:
- FastAPI router pattern
- Pydantic request/response models with validation
- Dependency injection via Depends() for easy testing
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from verse_guidance.matching.engine import VerseGuidanceEngine
from verse_guidance.matching.models import MatchResult, Passage, ThematicCollection

# =============================================================================
# Module Constants
# =============================================================================

API_PREFIX: str = "/v1/guidance"
GUIDANCE_TAG: str = "guidance"
MAX_GOAL_LENGTH: int = 2000


# =============================================================================
# Request Models
# =============================================================================


class GoalRequest(BaseModel):
    """Request body for goal matching."""

    goal_text: str = Field(..., min_length=1, max_length=MAX_GOAL_LENGTH)


class MoreForGoalRequest(BaseModel):
    """Request body for load-more.

    Attributes:
        goal_text: Goal text used for the initial lookup
        current_count: Number of passages the caller already shows
    """

    goal_text: str = Field(..., min_length=1, max_length=MAX_GOAL_LENGTH)
    current_count: int = Field(default=1, ge=0)


class RecommendationRequest(BaseModel):
    """Request body for a personalized recommendation."""

    user_goals: list[str] = Field(default_factory=list)
    completed_habits: list[str] = Field(default_factory=list)


# =============================================================================
# Response Models
# =============================================================================


class PassageResponse(BaseModel):
    """A passage as rendered by the UI."""

    id: int
    collection_name: str
    collection_index: int
    line_number: int
    text_original: str
    text_translated: str
    themes: list[str]
    reflection: str
    practical_guidance: list[str]
    context: str
    life_application: str
    audio_ref: str | None = None

    @classmethod
    def from_passage(cls, passage: Passage) -> PassageResponse:
        return cls(
            id=passage.id,
            collection_name=passage.collection_name,
            collection_index=passage.collection_index,
            line_number=passage.line_number,
            text_original=passage.text_original,
            text_translated=passage.text_translated,
            themes=sorted(passage.themes),
            reflection=passage.reflection,
            practical_guidance=list(passage.practical_guidance),
            context=passage.context,
            life_application=passage.life_application,
            audio_ref=passage.audio_ref,
        )


class MatchResultResponse(BaseModel):
    """One matched passage with its guidance."""

    passage: PassageResponse
    relevance_score: float = Field(ge=0.0, le=1.0)
    practical_steps: list[str]
    prayer_recommendation: str | None = None
    related_habits: list[str]

    @classmethod
    def from_result(cls, result: MatchResult) -> MatchResultResponse:
        return cls(
            passage=PassageResponse.from_passage(result.passage),
            relevance_score=result.relevance_score,
            practical_steps=list(result.practical_steps),
            prayer_recommendation=result.prayer_recommendation,
            related_habits=list(result.related_habits),
        )


class GoalMatchesResponse(BaseModel):
    """Matches for a goal, best first."""

    matches: list[MatchResultResponse]


class ThematicCollectionResponse(BaseModel):
    """Passages and guidance for one theme."""

    theme: str
    description: str
    passages: list[PassageResponse]
    practical_guidance: list[str]
    recommended_actions: list[str]

    @classmethod
    def from_collection(cls, collection: ThematicCollection) -> ThematicCollectionResponse:
        return cls(
            theme=collection.theme,
            description=collection.description,
            passages=[PassageResponse.from_passage(p) for p in collection.passages],
            practical_guidance=list(collection.practical_guidance),
            recommended_actions=list(collection.recommended_actions),
        )


# =============================================================================
# Dependency Injection
# =============================================================================


def get_engine(request: Request) -> VerseGuidanceEngine:
    """Dependency provider for the engine built by the lifespan handler.

    Raises:
        HTTPException: 503 if the engine has not been constructed
    """
    engine: VerseGuidanceEngine | None = getattr(request.app.state, "engine", None)
    if engine is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Guidance engine not initialized",
        )
    return engine


EngineDep = Annotated[VerseGuidanceEngine, Depends(get_engine)]


# =============================================================================
# Router
# =============================================================================

guidance_router = APIRouter(prefix=API_PREFIX, tags=[GUIDANCE_TAG])


@guidance_router.post("/goal", response_model=GoalMatchesResponse)
async def match_goal(request: GoalRequest, engine: EngineDep) -> GoalMatchesResponse:
    """Find the most relevant passage for a goal.

    Example:
        POST /v1/guidance/goal
        {"goal_text": "Build a daily exercise habit"}
    """
    results = await engine.find_passages_for_goal(request.goal_text)
    return GoalMatchesResponse(matches=[MatchResultResponse.from_result(r) for r in results])


@guidance_router.post("/goal/more", response_model=GoalMatchesResponse)
async def more_for_goal(
    request: MoreForGoalRequest, engine: EngineDep
) -> GoalMatchesResponse:
    """Load up to three more passages not yet shown for the goal."""
    results = await engine.get_additional_passages_for_goal(
        request.goal_text, request.current_count
    )
    return GoalMatchesResponse(matches=[MatchResultResponse.from_result(r) for r in results])


@guidance_router.get("/themes/{theme}", response_model=ThematicCollectionResponse)
async def thematic_collection(theme: str, engine: EngineDep) -> ThematicCollectionResponse:
    """Return the thematic collection for a theme."""
    collection = await engine.get_thematic_collection(theme)
    if collection is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No collection available for theme '{theme}'",
        )
    return ThematicCollectionResponse.from_collection(collection)


@guidance_router.get(
    "/daily",
    response_model=PassageResponse,
    responses={404: {"description": "No passage available"}},
)
async def daily_passage(engine: EngineDep) -> PassageResponse:
    """Return a random passage for the day."""
    passage = await engine.get_daily_passage()
    if passage is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No passage available")
    return PassageResponse.from_passage(passage)


@guidance_router.post(
    "/recommendation",
    response_model=PassageResponse,
    responses={404: {"description": "No passage available"}},
)
async def smart_recommendation(
    request: RecommendationRequest, engine: EngineDep
) -> PassageResponse:
    """Return a passage personalized to the user's goals and habits."""
    passage = await engine.get_smart_recommendation(
        request.user_goals, request.completed_habits
    )
    if passage is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No passage available")
    return PassageResponse.from_passage(passage)
