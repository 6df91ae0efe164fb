import logging
from fastapi import APIRouter, HTTPException, Request, Response
from starlette.concurrency import run_in_threadpool
from typing import List, Optional

from ideaboard.core.limiter import limiter
from ideaboard.core.config import settings
from ideaboard.services.board import IdeaBoard, IdeaBoardError, sorted_by_novelty
from ideaboard.services.novelty import novelty_badge
from ideaboard.services.types import AnalysisResult, RankedIdea

from ..models.request import AnalysisOptions, AnalyzeRequest, IdeaInput, SubmitIdeaRequest
from ..models.response import AnalysisResponse, SubmitIdeaResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ideas"])

@router.post("/analyze", response_model=AnalysisResponse)
@limiter.limit(settings.RATE_LIMIT_PER_USER)
async def analyze_ideas(
    request: Request,
    analyzeRequest: AnalyzeRequest,
) -> AnalysisResponse:
    """
    Cluster ideas into themes and score their novelty.

    The whole analysis is recomputed from the ideas in the request:
    - Group ideas into clusters named after their top keywords
    - Score every idea 0-100 for novelty, weighted by relevance to the problem statement
    - Pick the five most novel ideas
    - Optionally include the per-idea novelty breakdown and the pairwise similarity matrix

    Returns:
        AnalysisResponse with clusters, scores, stats and ideas ranked by novelty

    Raises:
        HTTPException(400): If input data is invalid
        HTTPException(429): If rate limit is exceeded
    """
    too_large = check_request_size(analyzeRequest.ideas, analyzeRequest.problem_statement)
    if too_large is not None:
        return too_large

    logger.info("Analyzing %d ideas", len(analyzeRequest.ideas))
    try:
        board = build_board(analyzeRequest.problem_statement, analyzeRequest.ideas)
    except IdeaBoardError as e:
        raise HTTPException(status_code=400, detail=str(e))

    options = analyzeRequest.options or AnalysisOptions()
    # CPU bound, keep it off the event loop
    analysis = await run_in_threadpool(board.analyze, include_similarity_matrix=options.similarity_matrix)
    return AnalysisResponse(**build_base_response(board, analysis, options))

@router.post("/ideas", response_model=SubmitIdeaResponse)
@limiter.limit(settings.RATE_LIMIT_PER_USER)
async def submit_idea(
    request: Request,
    submitRequest: SubmitIdeaRequest,
) -> SubmitIdeaResponse:
    """
    Add a new idea to the given list and score it together with all the others.

    The new idea gets the next free id ("i<n>"), a timestamp and "Anonymous" as
    author if none is given. It is flagged as a standout when its novelty
    reaches STANDOUT_NOVELTY_THRESHOLD.

    Raises:
        HTTPException(400): If the idea text is empty or ids are duplicated
        HTTPException(429): If rate limit is exceeded
    """
    too_large = check_request_size(
        submitRequest.ideas, submitRequest.problem_statement + submitRequest.text, extra_ideas=1
    )
    if too_large is not None:
        return too_large

    try:
        board = build_board(submitRequest.problem_statement, submitRequest.ideas)
        submission = await run_in_threadpool(board.submit, submitRequest.text, submitRequest.author)
    except IdeaBoardError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info("Submitted idea %s with novelty %s", submission.idea.id, submission.novelty)
    return SubmitIdeaResponse(
        idea=submission.idea,
        novelty=submission.novelty,
        badge=submission.badge,
        is_standout=submission.is_standout,
        analysis=AnalysisResponse(**build_base_response(board, submission.analysis)),
    )

def check_request_size(ideas: List[IdeaInput], extra_text: str = "", extra_ideas: int = 0) -> Optional[Response]:
    """Reject requests the quadratic analysis should not be run on"""
    num_ideas = len(ideas) + extra_ideas
    total_bytes = sum(len(item.text.encode('utf-8')) for item in ideas) + len(extra_text.encode('utf-8'))

    if num_ideas > settings.MAX_IDEAS:
        return Response(status_code=400, content=f'Please provide at most {settings.MAX_IDEAS} ideas to analyze')

    if total_bytes > settings.MAX_TOTAL_BYTES:
        return Response(status_code=400, content=f'Please provide at most {settings.MAX_TOTAL_BYTES} bytes of text to analyze')

    return None

def build_board(problem_statement: str, idea_inputs: List[IdeaInput]) -> IdeaBoard:
    """Rebuild the caller's idea list, generating ids for ideas that come without one"""
    board = IdeaBoard(problem_statement, standout_threshold=settings.STANDOUT_NOVELTY_THRESHOLD)
    # generated ids must not collide with ids that appear later in the list
    board.reserve_ids(str(item.id) for item in idea_inputs if item.id is not None)
    for item in idea_inputs:
        board.add(
            item.text,
            author=item.author,
            idea_id=str(item.id) if item.id is not None else None,
            created_at=item.created_at,
        )
    return board

def build_base_response(board: IdeaBoard, analysis: AnalysisResult, options: Optional[AnalysisOptions] = None) -> dict:
    """Build base response with ideas ranked by novelty and their clusters"""
    cluster_by_idea = {
        idea_id: cluster.id
        for cluster in analysis.clusters
        for idea_id in cluster.idea_ids
    }

    ranked_ideas = []
    for idea in sorted_by_novelty(board.ideas, analysis.novelty_by_id):
        score = analysis.novelty_by_id.get(idea.id)
        ranked_ideas.append(RankedIdea(
            id=idea.id,
            text=idea.text,
            author=idea.author,
            novelty=score,
            badge=novelty_badge(score) if score is not None else None,
            cluster_id=cluster_by_idea.get(idea.id),
        ))

    response = {
        "clusters": analysis.clusters,
        "novelty_by_id": analysis.novelty_by_id,
        "stats": analysis.stats,
        "top_ideas": analysis.top_ideas,
        "ranked_ideas": ranked_ideas,
        "novelty_details": None,
        "pairwise_similarity_matrix": None,
    }

    if options is not None:
        if options.novelty_details:
            response["novelty_details"] = analysis.details
        if options.similarity_matrix:
            response["pairwise_similarity_matrix"] = analysis.pairwise_similarity

    return response
