from spinwheel.models.game import (
    DisplayPage,
    GameConfig,
    PrizeOption,
    SpinHistory,
    SpinResult,
    get_default_config,
)
from spinwheel.models.restaurant import (
    Advertisement,
    MenuItem,
    Recommendation,
    RestaurantConfig,
    RestaurantData,
    get_default_restaurant_data,
)

__all__ = [
    "DisplayPage",
    "GameConfig",
    "PrizeOption",
    "SpinHistory",
    "SpinResult",
    "get_default_config",
    "Advertisement",
    "MenuItem",
    "Recommendation",
    "RestaurantConfig",
    "RestaurantData",
    "get_default_restaurant_data",
]
