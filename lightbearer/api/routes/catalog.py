"""
lightbearer.api.routes.catalog — Perks, traits, catalysts, mod attributes
==========================================================================

The four flat catalogs get identical list/get/create/update/delete routes,
registered from their :class:`CatalogResource` descriptors.  Mod rarities
are read-only; characters can be listed by anyone and created by admins.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import Engine

from lightbearer.api.deps import Principal, get_current_admin, get_engine
from lightbearer.api.schemas import CamelModel
from lightbearer.services import catalog_service
from lightbearer.services.catalog_service import CatalogResource

router = APIRouter(tags=["catalog"])


# ---------------------------------------------------------------------------
# Pydantic schemas
# ---------------------------------------------------------------------------
class ComponentIn(CamelModel):
    """Superset of the catalog columns; each resource reads the ones it owns."""

    name: str | None = None
    description: str | None = None
    effect: str | None = None
    icon_url: str | None = None
    slot: int | None = None
    type: str | None = None
    requirement_description: str | None = None
    min_stat_bonus: float | None = None
    max_stat_bonus: float | None = None


class CharacterIn(CamelModel):
    name: str | None = None
    description: str | None = None
    image_url: str | None = None


# ---------------------------------------------------------------------------
# Generic catalog routes
# ---------------------------------------------------------------------------
def _register(path: str, resource: CatalogResource) -> None:
    tag = [resource.plural]

    if resource.filters == ("slot",):
        @router.get(path, tags=tag, name=f"list_{resource.plural}")
        def list_slot(engine: Annotated[Engine, Depends(get_engine)], slot: int | None = None):
            return catalog_service.list_items(engine, resource, slot=slot)
    elif resource.filters == ("type",):
        @router.get(path, tags=tag, name=f"list_{resource.plural}")
        def list_type(engine: Annotated[Engine, Depends(get_engine)], type: str | None = None):
            return catalog_service.list_items(engine, resource, type=type)
    else:
        @router.get(path, tags=tag, name=f"list_{resource.plural}")
        def list_all(engine: Annotated[Engine, Depends(get_engine)]):
            return catalog_service.list_items(engine, resource)

    @router.get(f"{path}/{{item_id}}", tags=tag, name=f"get_{resource.singular}")
    def get_one(item_id: int, engine: Annotated[Engine, Depends(get_engine)]):
        return catalog_service.get_item(engine, resource, item_id)

    @router.post(path, status_code=201, tags=tag, name=f"create_{resource.singular}")
    def create(
        body: ComponentIn,
        admin: Annotated[Principal, Depends(get_current_admin)],
        engine: Annotated[Engine, Depends(get_engine)],
    ):
        return catalog_service.create_item(engine, resource, body.model_dump())

    @router.put(f"{path}/{{item_id}}", tags=tag, name=f"update_{resource.singular}")
    def update(
        item_id: int,
        body: ComponentIn,
        admin: Annotated[Principal, Depends(get_current_admin)],
        engine: Annotated[Engine, Depends(get_engine)],
    ):
        return catalog_service.update_item(engine, resource, item_id, body.model_dump())

    @router.delete(f"{path}/{{item_id}}", tags=tag, name=f"delete_{resource.singular}")
    def remove(
        item_id: int,
        admin: Annotated[Principal, Depends(get_current_admin)],
        engine: Annotated[Engine, Depends(get_engine)],
    ):
        return catalog_service.delete_item(engine, resource, item_id)


_register("/perks", catalog_service.PERKS)
_register("/traits", catalog_service.TRAITS)
_register("/catalysts", catalog_service.CATALYSTS)
_register("/mod-attributes", catalog_service.MOD_ATTRIBUTES)


# ---------------------------------------------------------------------------
# Mod rarities & characters
# ---------------------------------------------------------------------------
@router.get("/mod-rarities")
def list_mod_rarities(engine: Annotated[Engine, Depends(get_engine)]):
    return catalog_service.list_mod_rarities(engine)


@router.get("/characters")
def list_characters(engine: Annotated[Engine, Depends(get_engine)]):
    return catalog_service.list_characters(engine)


@router.post("/characters")
def create_character(
    body: CharacterIn,
    admin: Annotated[Principal, Depends(get_current_admin)],
    engine: Annotated[Engine, Depends(get_engine)],
):
    return catalog_service.create_character(
        engine, name=body.name, description=body.description, image_url=body.image_url
    )
