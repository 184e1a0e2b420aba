from fastapi import APIRouter

from spinwheel.api.v1.endpoints import game, restaurant

router = APIRouter()
router.include_router(game.router, tags=["game"])
router.include_router(restaurant.router, tags=["restaurant"])
