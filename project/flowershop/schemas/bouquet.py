# flowershop/schemas/bouquet.py

from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional

BouquetSize = Literal["small", "medium", "large"]

# price in pesos and the most stems the wrapping holds
BOUQUET_SIZES: Dict[str, Dict[str, int]] = {
    "small": {"price": 250, "max_stems": 2},
    "medium": {"price": 600, "max_stems": 6},
    "large": {"price": 1200, "max_stems": 12},
}

class BouquetColor(BaseModel):
    id: int
    name: str
    hex_code: Optional[str] = None
    description: Optional[str] = None

    model_config = {
        "from_attributes": True
    }

class FlowerType(BaseModel):
    id: int
    name: str
    image: Optional[str] = None
    category: Optional[str] = None
    available: bool = True

    model_config = {
        "from_attributes": True
    }

class StemChoice(BaseModel):
    flower_type_id: int
    count: int = Field(..., ge=1)

class CustomBouquetRequest(BaseModel):
    """
    A bouquet put together in the builder: size, colour theme and stems.
    The price comes from the size, never from the client.
    """
    size: BouquetSize
    color_id: int
    stems: List[StemChoice] = Field(default_factory=list)
    quantity: int = Field(1, ge=1)

class CustomStems(BaseModel):
    flower_type_id: int
    name: str
    count: int

class CustomDetails(BaseModel):
    size: BouquetSize
    color: str
    flowers: List[CustomStems] = Field(default_factory=list)
