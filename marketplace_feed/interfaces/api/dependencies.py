"""FastAPI dependency utilities."""

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from marketplace_feed.application.use_cases.activity import FeedSessionRegistry
from marketplace_feed.infrastructure.database import get_db
from marketplace_feed.infrastructure.repositories import ProfileRepository

VIEWER_HEADER = "X-Viewer-Id"


def get_viewer_id(
    x_viewer_id: str | None = Header(default=None, alias=VIEWER_HEADER),
) -> str:
    """Return the viewer identity supplied by the upstream authentication layer."""

    viewer_id = (x_viewer_id or "").strip()
    if not viewer_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Missing {VIEWER_HEADER} header",
        )
    return viewer_id


def require_admin_viewer(
    viewer_id: str = Depends(get_viewer_id),
    db: Session = Depends(get_db),
) -> str:
    """Ensure the viewer is an active administrator entitled to the feeds."""

    if not ProfileRepository(db).is_admin(viewer_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to view the activity feeds",
        )
    return viewer_id


def get_feed_registry(request: Request) -> FeedSessionRegistry:
    """Return the feed session registry owned by the running application."""

    return request.app.state.feed_registry
