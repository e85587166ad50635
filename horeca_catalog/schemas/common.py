from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """JSON 은 camelCase, 파이썬 코드는 snake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeleteResponse(CamelModel):
    success: bool = True
    message: str
