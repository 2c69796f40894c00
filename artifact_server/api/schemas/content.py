"""Request and response bodies for the content retrieval endpoints."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WebContent(BaseModel):
    title: str = ""
    content: str = ""


class ImageRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    api_key: str = Field(min_length=1)
    prompt: str = Field(min_length=1)


class ImageResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    image_url: str


class Transcript(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    text_only: str = ""
