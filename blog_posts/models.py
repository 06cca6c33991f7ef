# --- Pydantic Models ---
from pydantic import BaseModel, ConfigDict


class Post(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str


# Ordered, in the order the store returned them
PostCollection = tuple[Post, ...]
