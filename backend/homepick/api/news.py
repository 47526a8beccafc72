from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from homepick.errors import DocumentNotFoundError
from homepick.models.news import NewsCategory
from homepick.schemas.listing import ALL
from homepick.schemas.news import NewsCreate, NewsListResponse, NewsResponse, NewsUpdate
from homepick.schemas.user import UserProfile
from homepick.services.auth import require_admin
from homepick.services.document_store import DocumentStore, get_store

router = APIRouter()

COLLECTION = "news"


@router.get("", response_model=NewsListResponse)
def get_news(category: str = Query(ALL), store: DocumentStore = Depends(get_store)):
    """Get news articles, newest first, optionally for one category."""
    category = category.upper()
    if category != ALL and category not in NewsCategory.__members__:
        raise HTTPException(status_code=422, detail=f"Unknown news category: {category}")

    items = [NewsResponse.model_validate(doc) for doc in store.list(COLLECTION, "-created_at")]
    if category != ALL:
        items = [item for item in items if item.category.value == category]
    return NewsListResponse(items=items, total=len(items))


@router.get("/{article_id}", response_model=NewsResponse)
def get_article(article_id: str, store: DocumentStore = Depends(get_store)):
    try:
        return NewsResponse.model_validate(store.get(COLLECTION, article_id))
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")


@router.post("", response_model=NewsResponse, status_code=201)
def create_article(
    article: NewsCreate,
    admin: UserProfile = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
):
    """Publish a news article (admin only)."""
    return NewsResponse.model_validate(store.create(COLLECTION, article.model_dump()))


@router.put("/{article_id}", response_model=NewsResponse)
def update_article(
    article_id: str,
    update: NewsUpdate,
    admin: UserProfile = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
):
    """Edit a news article (admin only). The merged article must still be valid."""
    try:
        current = store.get(COLLECTION, article_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")

    update_data = update.model_dump(exclude_unset=True)
    merged = {k: v for k, v in current.items() if k in NewsCreate.model_fields}
    merged.update(update_data)
    try:
        validated = NewsCreate.model_validate(merged)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in e.errors()],
        )

    changes = {k: v for k, v in validated.model_dump().items() if k in update_data}
    if not changes:
        return NewsResponse.model_validate(current)
    try:
        return NewsResponse.model_validate(store.update(COLLECTION, article_id, changes))
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")


@router.delete("/{article_id}")
def delete_article(
    article_id: str,
    admin: UserProfile = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
):
    """Delete a news article (admin only)."""
    try:
        store.delete(COLLECTION, article_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"detail": "Deleted", "id": article_id}
