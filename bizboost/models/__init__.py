from bizboost.models.businesses import Business
from bizboost.models.deals import Deal
from bizboost.models.favorites import Favorite
from bizboost.models.reviews import Review

__all__ = ["Business", "Deal", "Favorite", "Review"]
