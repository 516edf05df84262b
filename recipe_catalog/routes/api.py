import logging
from typing import Optional

from fastapi import APIRouter, Depends

from recipe_catalog.config import get_settings
from recipe_catalog.core.abstractions import IdentityGateway
from recipe_catalog.core.dependencies import (
    get_catalog_service,
    get_identity_gateway,
    get_current_principal,
    get_optional_principal,
    require_admin,
)
from recipe_catalog.core.errors import AuthorizationError, ValidationError
from recipe_catalog.models import (
    CommentCreate,
    Principal,
    RatingCreate,
    RecipeCreate,
    RecipeUpdate,
    Role,
    RoleUpdateRequest,
    SignupRequest,
)
from recipe_catalog.services.catalog import CatalogService
from recipe_catalog.validation import load_sample_recipes

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Users ---


@router.post("/signup")
def signup(
    body: SignupRequest,
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    """Create a user through the identity provider."""
    if not body.email or not body.password:
        raise ValidationError("email and password are required")
    if body.role == Role.ADMIN and not get_settings().allow_admin_signup:
        raise AuthorizationError("admin signup is disabled")
    user = identity.create_user(body.email, body.password, body.name, body.role.value)
    logger.info("Signed up %s as %s", body.email, body.role.value)
    return {"success": True, "user": user}


@router.post("/update-user-role")
def update_user_role(
    body: RoleUpdateRequest,
    principal: Principal = Depends(require_admin),
    identity: IdentityGateway = Depends(get_identity_gateway),
):
    """Change another user's role claim (admin only)."""
    if not body.user_id or body.role is None:
        raise ValidationError("userId and role are required")
    user = identity.update_user_role(body.user_id, body.role.value)
    logger.info("%s set role of %s to %s", principal.user_id, body.user_id, body.role.value)
    return {"success": True, "user": user}


# --- Recipes ---


@router.get("/recipes")
def list_recipes(catalog: CatalogService = Depends(get_catalog_service)):
    """All recipes with averageRating, totalRatings and totalComments."""
    return [recipe.to_json() for recipe in catalog.list_recipes()]


@router.get("/recipes/{key}")
def get_recipe(key: str, catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.get_recipe(key).to_json()


@router.post("/recipes")
def create_recipe(
    recipe: RecipeCreate,
    principal: Principal = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Create a new recipe (admin only)"""
    new_recipe = catalog.create_recipe(recipe)
    return {"success": True, "recipe": new_recipe.to_json()}


@router.put("/recipes/{key}")
def update_recipe(
    key: str,
    recipe: RecipeUpdate,
    principal: Principal = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Update an existing recipe (admin only)"""
    updated = catalog.update_recipe(key, recipe)
    return {"success": True, "recipe": updated.to_json()}


@router.delete("/recipes/{key}")
def delete_recipe(
    key: str,
    principal: Principal = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Delete a recipe (admin only). Ratings and comments are left in place."""
    catalog.delete_recipe(key)
    return {"success": True}


@router.post("/init-recipes")
def init_recipes(
    principal: Principal = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Seed the example recipes. No-op once any recipe exists."""
    count = catalog.seed(load_sample_recipes())
    if count == 0:
        return {"message": "recipes already initialized"}
    return {"success": True, "message": "example recipes created", "count": count}


# --- Ratings ---


@router.post("/recipes/{key}/rating")
def submit_rating(
    key: str,
    body: RatingCreate,
    principal: Principal = Depends(get_current_principal),
    catalog: CatalogService = Depends(get_catalog_service),
):
    rating = catalog.submit_rating(key, principal, body.rating)
    return {"success": True, "rating": rating.to_json()}


@router.get("/recipes/{key}/my-rating")
def get_my_rating(
    key: str,
    principal: Optional[Principal] = Depends(get_optional_principal),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """The caller's rating, or null when anonymous or not yet rated."""
    return {"rating": catalog.get_user_rating(key, principal)}


# --- Comments ---


@router.get("/recipes/{key}/comments")
def list_comments(key: str, catalog: CatalogService = Depends(get_catalog_service)):
    """Comments for a recipe, newest first."""
    return [comment.to_json() for comment in catalog.list_comments(key)]


@router.post("/recipes/{key}/comments")
def add_comment(
    key: str,
    body: CommentCreate,
    principal: Principal = Depends(get_current_principal),
    catalog: CatalogService = Depends(get_catalog_service),
):
    comment = catalog.add_comment(key, principal, body.comment)
    return {"success": True, "comment": comment.to_json()}


# --- Admin ---


@router.delete("/admin/comments/{key}")
def delete_comment(
    key: str,
    principal: Principal = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    catalog.delete_comment(key)
    return {"success": True}


@router.post("/admin/purge-orphans")
def purge_orphans(
    principal: Principal = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service),
):
    """Remove ratings and comments left behind by deleted recipes."""
    removed = catalog.purge_orphans()
    return {"success": True, "removed": removed}
