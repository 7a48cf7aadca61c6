# flowershop/schemas/product.py

from pydantic import BaseModel, Field
from typing import List, Optional

from flowershop.schemas.bouquet import CustomDetails

class Category(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    image: Optional[str] = None

    model_config = {
        "from_attributes": True
    }

class Product(BaseModel):
    id: int
    name: str
    price: int = Field(..., ge=0, description="Price in whole pesos")
    image: str = ""
    categories: List[str] = Field(default_factory=list, description="Category names")
    badge: Optional[str] = None
    custom: Optional[CustomDetails] = Field(None, description="Builder choices, only on custom bouquets")

    @property
    def is_custom(self) -> bool:
        return self.custom is not None
