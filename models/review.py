from pydantic import BaseModel, StrictInt, model_validator
from typing import Optional

class ReviewCreate(BaseModel):
    """A review submission: either an integer quality or a rating label."""
    quality: Optional[StrictInt] = None
    rating: Optional[str] = None

    @model_validator(mode="after")
    def validate_one_of(self):
        if (self.quality is None) == (self.rating is None):
            raise ValueError("Provide exactly one of 'quality' or 'rating'")
        return self
